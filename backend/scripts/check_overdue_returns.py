"""Cron entry point: create or escalate follow-up tasks for overdue returns.

Usage:
    python scripts/check_overdue_returns.py
"""

import asyncio

from studio.core.config import get_settings
from studio.core.logging import configure_structlog

configure_structlog(json_logs=not get_settings().debug, service_name="studio-returns-check")

from studio.db import close_db, get_session_factory, init_db
from studio.services.returns_service import ReturnsService


async def main() -> None:
    await init_db()
    try:
        result = await ReturnsService(get_session_factory()).check_overdue_returns()
        print(
            f"{result.message}: processed {result.processed} return(s), "
            f"created {result.tasks_created} task(s), updated {result.tasks_updated} task(s)."
        )
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
