"""
CLI entrypoint for removing expired login sessions. Run from cron, e.g.:

  python -m driveeasy.purge_sessions

Or hourly: 0 * * * * cd /path/to/driveeasy && .venv/bin/python -m driveeasy.purge_sessions
"""

import logging
import sys
from datetime import timedelta

from driveeasy.core.config import get_settings
from driveeasy.core.database import session_scope
from driveeasy.core.errors import InternalError
from driveeasy.services.sessions import DatabaseSessionStore, SessionManager

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete sessions whose absolute expiry has passed."""
    settings = get_settings()
    with session_scope() as db:
        manager = SessionManager(
            DatabaseSessionStore(db),
            ttl=timedelta(hours=settings.SESSION_TTL_HOURS),
        )
        try:
            purged = manager.purge_expired()
        except InternalError as e:
            logger.error("Session purge failed: %s", e.error)
            return 1
    logger.info("Session purge completed: sessions_deleted=%s", purged)
    return 0


if __name__ == "__main__":
    sys.exit(main())
