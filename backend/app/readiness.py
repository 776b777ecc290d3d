"""Readiness checks: config, packages, database."""
import asyncio
import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from app.infra.db.base import build_engine
from app.settings import Settings

logger = logging.getLogger(__name__)

# Result: (passed: bool, message: str)
CheckResult = tuple[bool, str]
ChecksDict = dict[str, CheckResult]

REQUIRED_CHECKS = ("config", "packages", "database")


def check_config(settings: Optional[Settings] = None) -> CheckResult:
    """Load settings (if not given) and read the values the service cannot start without."""
    try:
        if settings is None:
            from app.settings import load_settings
            settings = load_settings()
        _ = settings.app_name
        _ = settings.database_url
        if settings.nonce_retention_seconds < 2 * settings.timestamp_window_seconds:
            return False, "nonce retention shorter than twice the timestamp window"
        return True, "ok"
    except Exception as e:
        return False, str(e)


def check_packages() -> CheckResult:
    """Import critical modules: uvicorn, sqlalchemy, the DB driver, app.main."""
    missing = []
    try:
        import uvicorn  # noqa: F401
    except ImportError:
        missing.append("uvicorn")
    try:
        import sqlalchemy  # noqa: F401
    except ImportError:
        missing.append("sqlalchemy")
    try:
        import asyncpg  # noqa: F401
    except ImportError:
        missing.append("asyncpg")
    try:
        import app.main  # noqa: F401
    except ImportError as e:
        missing.append(f"app.main ({e})")
    if missing:
        return False, f"missing: {', '.join(missing)}"
    return True, "ok"


async def check_database_async(database_url: str, engine: Optional[AsyncEngine] = None) -> CheckResult:
    """Run a trivial query against the database (on the given engine, or a throwaway one)."""
    try:
        owned = engine is None
        if owned:
            engine = build_engine(database_url)
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        if owned:
            await engine.dispose()
        return True, "ok"
    except Exception as e:
        return False, str(e)


def run_all_checks(settings: Optional[Settings] = None) -> ChecksDict:
    """Run all readiness checks (sync). Returns dict of check_name -> (passed, message)."""
    config = check_config(settings)
    if settings is None and config[0]:
        from app.settings import load_settings
        settings = load_settings()
    database = asyncio.run(check_database_async(settings.database_url)) if settings else (False, "no config")
    return {
        "config": config,
        "packages": check_packages(),
        "database": database,
    }


async def run_all_checks_async(settings: Settings, engine: Optional[AsyncEngine] = None) -> ChecksDict:
    """Run all readiness checks (async). Use from async context (e.g. GET /ready)."""
    return {
        "config": check_config(settings),
        "packages": check_packages(),
        "database": await check_database_async(settings.database_url, engine),
    }


def is_ready(checks: ChecksDict) -> tuple[bool, dict[str, str]]:
    """
    True if all required checks pass.
    Returns (ready: bool, checks_summary: dict of name -> "ok" | error message).
    """
    summary = {name: msg for name, (_, msg) in checks.items()}
    ready = all(checks.get(name, (False, ""))[0] for name in REQUIRED_CHECKS)
    if not ready:
        failed = [name for name in REQUIRED_CHECKS if not checks.get(name, (False, ""))[0]]
        logger.warning("Readiness failed: %s", ", ".join(failed))
    return ready, summary
