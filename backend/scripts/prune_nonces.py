#!/usr/bin/env python3
"""Prune spent nonces older than the configured retention once (e.g. from cron when the in-process pruner is off)."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from app.domain.common.types import SystemClock
from app.infra.db.base import build_engine, build_sessionmaker
from app.infra.jobs.tasks import process_prune_nonces_job
from app.settings import load_settings


async def prune() -> int:
    settings = load_settings()
    engine = build_engine(settings.database_url, ssl_verify=settings.database_ssl_verify)
    try:
        return await process_prune_nonces_job(
            build_sessionmaker(engine),
            SystemClock(),
            settings.nonce_retention_seconds,
        )
    finally:
        await engine.dispose()


def main() -> int:
    removed = asyncio.run(prune())
    print(f"Pruned {removed} nonces")
    return 0


if __name__ == "__main__":
    sys.exit(main())
