#!/usr/bin/env python3
"""Check whether the ingestion server can start: config, packages, database.

Usage:
  python scripts/check_readiness.py
  python scripts/check_readiness.py --config ./config.yaml

Exit code 0 when every required check passes, 1 otherwise.
"""
import argparse
import sys
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from app.readiness import REQUIRED_CHECKS, is_ready, run_all_checks
from app.settings import load_settings


def main() -> int:
    parser = argparse.ArgumentParser(description="Run readiness checks")
    parser.add_argument("--config", default=None, help="Config file (defaults to CONFIG_FILE or backend/config.yaml)")
    args = parser.parse_args()

    try:
        settings = load_settings(args.config)
    except Exception as e:
        print(f"  config: FAIL  {e}")
        print("Readiness: NOT READY")
        return 1

    print(f"{settings.app_name} {settings.app_version}")
    checks = run_all_checks(settings)
    ready, summary = is_ready(checks)
    for name in REQUIRED_CHECKS:
        passed = checks.get(name, (False, ""))[0]
        print(f"  {name:<9} {'OK' if passed else 'FAIL'}  {summary.get(name, 'not run')}")
    print("Readiness: READY" if ready else "Readiness: NOT READY")
    return 0 if ready else 1


if __name__ == "__main__":
    sys.exit(main())
