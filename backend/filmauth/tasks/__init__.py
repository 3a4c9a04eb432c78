from .cleanup_scheduler import TokenCleanupScheduler, start_cleanup_scheduler

__all__ = ["TokenCleanupScheduler", "start_cleanup_scheduler"]
