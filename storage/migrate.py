"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS assessment_jobs (
  request_id TEXT PRIMARY KEY,
  status TEXT NOT NULL,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,
  question TEXT,
  result_json TEXT,
  error TEXT,
  http_status INTEGER
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_assessment_jobs_status ON assessment_jobs(status);
""",
]


def migrate(db_path: str) -> None:
    """Create the job-status tables when they do not exist yet."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        for statement in SCHEMA:
            conn.execute(statement)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    from config.settings import settings

    migrate(settings.DB_PATH)
