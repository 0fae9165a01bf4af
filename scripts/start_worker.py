#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker with the embedded beat scheduler, so the daily
# pre-student cleanup runs without a separate beat process.
#
# Usage:
#   python scripts/start_worker.py
#
#   # Or use Celery CLI directly
#   celery -A workers.celery_app worker --beat --loglevel=info -Q default,maintenance
#
# Prerequisites:
#   - Redis must be running
#   - Environment variables must be set (.env file)
# =============================================================================

from workers.celery_app import celery_app


def main():
    """Start the Celery worker."""
    print("=" * 60)
    print("Foititis Celery Worker")
    print("=" * 60)
    print()
    print("Starting worker with beat...")
    print("Press Ctrl+C to stop")
    print()

    celery_app.worker_main([
        "worker",
        "--beat",
        "--loglevel=info",
        "--concurrency=1",
        "--queues=default,maintenance",
    ])


if __name__ == "__main__":
    main()
