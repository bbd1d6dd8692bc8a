"""Eats API service entrypoint.

Run locally with `python -m services.api.app.main` from the repo root.
"""

import os

import uvicorn
from fastapi import FastAPI
from services.api.app.config import configure_logging, env_int
from services.api.app.db.init_db import init_db
from services.api.app.routers.orders import router as orders_router
from services.api.app.routers.payments import router as payments_router
from services.api.app.routers.restaurants import router as restaurants_router
from services.api.app.routers.users import router as users_router
from services.api.app.services.events_factory import build_event_bus
from services.api.app.services.mail_factory import build_mail_sender

app = FastAPI(title="Eats API")

app.include_router(users_router)
app.include_router(restaurants_router)
app.include_router(orders_router)
app.include_router(payments_router)


@app.on_event("startup")
def _startup() -> None:
    configure_logging()
    init_db()
    app.state.event_bus = build_event_bus()
    app.state.mail_sender = build_mail_sender()


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


def main() -> None:
    uvicorn.run(
        app,
        host=os.getenv("EATS_HOST", "127.0.0.1"),
        port=env_int("EATS_PORT", default=8000),
    )


if __name__ == "__main__":
    main()
