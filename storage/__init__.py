"""SQLite-backed job-status store."""
from .jobs import JobRecord, complete_job, create_job, fail_job, get_job
from .migrate import migrate

__all__ = ["JobRecord", "complete_job", "create_job", "fail_job", "get_job", "migrate"]
