#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker with the embedded beat scheduler, which runs the
# listing expiry sweep and the platform stats refresh.
#
# Usage:
#   python scripts/start_worker.py
#
#   # Or use Celery CLI directly
#   celery -A workers.celery_app worker -B --loglevel=info
#
# Prerequisites:
#   - Redis must be running
#   - Environment variables must be set (.env file)
#   - Run from the project root (or after `pip install -e .`)
# =============================================================================

from workers.celery_app import celery_app


def main():
    """Start the Celery worker."""
    print("=" * 60)
    print("EcoShare Celery Worker")
    print("=" * 60)
    print()
    print("Starting worker with beat scheduler...")
    print("Press Ctrl+C to stop")
    print()

    celery_app.worker_main([
        "worker",
        "--beat",
        "--loglevel=info",
        "--concurrency=1",
    ])


if __name__ == "__main__":
    main()
