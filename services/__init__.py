"""Proxy services built on the webhook client and job store."""
from .relay import relay, run_background_forward

__all__ = ["relay", "run_background_forward"]
