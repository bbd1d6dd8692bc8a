from __future__ import annotations

from services.api.app.config import configure_logging
from services.api.app.db.database import db_session
from services.api.app.db.init_db import init_db
from services.api.app.services.restaurants import RestaurantService


def main() -> int:
    """Clear promotions whose paid window has ended. Meant to run from cron."""

    configure_logging()
    init_db()

    db = db_session()
    try:
        expired = RestaurantService(db).expire_promotions()
        print(f"Expired promotions: {expired}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
