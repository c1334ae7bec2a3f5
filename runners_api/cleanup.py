"""
Purge topic subscriptions that were switched off more than SUBSCRIPTION_CLEANUP_DAYS ago.

  python -m runners_api.cleanup

Schedule it once a day, for example:
  30 2 * * * cd /srv/runners-registry && .venv/bin/python -m runners_api.cleanup
"""

import logging
import sys

from runners_api.core.config import get_settings
from runners_api.core.database import SessionLocal
from runners_api.services.topics import cleanup_subscriptions

logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Exit status 0 on success, 1 when the purge failed (details in the log)."""
    days = get_settings().SUBSCRIPTION_CLEANUP_DAYS
    session = SessionLocal()
    try:
        removed = cleanup_subscriptions(session, days)
    except Exception:
        logger.exception("Subscription cleanup failed (older_than_days=%s)", days)
        return 1
    finally:
        session.close()
    logger.info("Subscription cleanup finished: removed=%s older_than_days=%s", removed, days)
    return 0


if __name__ == "__main__":
    sys.exit(main())
