"""Scheduled background jobs."""

from commission_ledger.scheduler.jobs import auto_settle_job, scheduler, setup_scheduler

__all__ = ["auto_settle_job", "scheduler", "setup_scheduler"]
