"""
Rate limits module - Fixed-window request counters per API key.

Background Jobs (via APScheduler):
- evict_stale_rate_limits: Runs hourly, deletes records older than the
  retention period
"""

from .jobs import register_rate_limit_jobs

__all__ = ["register_rate_limit_jobs"]
