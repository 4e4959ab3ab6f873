#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Runs one worker process that consumes both queues and embeds the beat
# scheduler, which is enough for a single-node deployment.
#
# Usage:
#   python scripts/start_worker.py
#   python scripts/start_worker.py --no-beat --concurrency 4
#
# Requires Redis at REDIS_URL (see .env.example).
# =============================================================================

import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workers.celery_app import celery_app

QUEUES = "default,workflows"


def build_argv(concurrency: int, beat: bool) -> list[str]:
    argv = ["worker", "--loglevel=info", f"--concurrency={concurrency}", f"--queues={QUEUES}"]
    if beat:
        argv.append("--beat")
    return argv


def main():
    parser = argparse.ArgumentParser(description="Start a Transformo Celery worker")
    parser.add_argument("--concurrency", type=int, default=2)
    parser.add_argument("--no-beat", action="store_true", help="don't run the periodic scheduler")
    args = parser.parse_args()

    print(f"Transformo worker: queues={QUEUES} concurrency={args.concurrency} beat={not args.no_beat}")
    celery_app.worker_main(build_argv(args.concurrency, not args.no_beat))


if __name__ == "__main__":
    main()
