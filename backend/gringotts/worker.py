"""Periodic billing worker.

Run with ``python -m gringotts.worker``.
"""
import logging
import time

from gringotts.config import get_settings
from gringotts.database import Base, engine, get_db_context
from gringotts.services.billing import run_billing_cycle

logger = logging.getLogger(__name__)


def run_once() -> int:
    """Charge all due subscriptions in one transaction."""
    with get_db_context() as db:
        return run_billing_cycle(db)


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from gringotts import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    logger.info(f"Starting billing worker, interval {settings.billing_interval_seconds}s")
    while True:
        try:
            run_once()
        except Exception:
            logger.exception("Billing cycle failed")
        time.sleep(settings.billing_interval_seconds)


if __name__ == "__main__":
    main()
