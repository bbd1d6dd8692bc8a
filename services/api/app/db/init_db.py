from __future__ import annotations

import logging

from services.api.app.config import env_flag
from services.api.app.db.database import get_engine
from services.api.app.db.models import Base

logger = logging.getLogger(__name__)


def init_db() -> None:
    if not env_flag("EATS_DB_AUTO_CREATE", default=True):
        return

    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured on %s", engine.url.render_as_string(hide_password=True))
