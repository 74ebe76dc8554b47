#!/usr/bin/env python3
"""
Celery worker script for the grocery marketplace.
Run this script to start the worker that delivers order emails.
"""

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

if __name__ == "__main__":
    from core.celery import celery_app
    from core.logger import configure_logging

    configure_logging()

    # Start Celery worker
    celery_app.start([
        "worker",
        "--loglevel=info",
        "--concurrency=2",
        "--without-gossip",
        "--without-mingle",
    ])
