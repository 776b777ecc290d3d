#!/usr/bin/env python3
"""Enable or disable a registered device (out-of-band administration).

Usage: python scripts/set_device_status.py <device_id> active|disabled
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.domain.common.errors import NotFoundError
from app.domain.devices.models import DeviceStatus
from app.domain.devices.services import DeviceRegistry
from app.infra.db.base import build_engine, build_sessionmaker
from app.infra.db.repositories.device_repo import DeviceRepositoryImpl
from app.settings import load_settings


async def set_device_status(device_id: str, status: DeviceStatus) -> bool:
    """Returns True if the device was found and updated."""
    settings = load_settings()
    engine = build_engine(settings.database_url, ssl_verify=settings.database_ssl_verify)
    try:
        async with build_sessionmaker(engine)() as session:
            registry = DeviceRegistry(DeviceRepositoryImpl(session))
            try:
                await registry.set_status(device_id, status)
            except NotFoundError:
                return False
            return True
    finally:
        await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("device_id")
    parser.add_argument("status", choices=[s.value for s in DeviceStatus])
    args = parser.parse_args()

    found = asyncio.run(set_device_status(args.device_id, DeviceStatus(args.status)))
    if not found:
        print(f"Device {args.device_id} not found")
        return 1
    print(f"Device {args.device_id} is now {args.status}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
