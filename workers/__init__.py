# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and periodic tasks.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (listing expiry, platform stats)
# - config.py: Worker settings and beat schedule
#
# Usage:
#   # Start worker with the beat scheduler
#   celery -A workers.celery_app worker -B --loglevel=info
#
#   # Or use the script
#   python scripts/start_worker.py
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
