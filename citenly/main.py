"""
ASGI entry point for the reminders API (`uvicorn citenly.main:app`).

The hourly reminder scheduler starts from the app lifespan when
REMINDER_SCHEDULER_ENABLED is set; otherwise an external cron hits
POST /api/v1/cron/reminders.
"""

import logging

import sentry_sdk

from citenly.config.settings import get_settings
from citenly.core.app_factory import create_app

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        send_default_pii=False,
        environment=settings.ENVIRONMENT,
    )

app = create_app()

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")
    uvicorn.run(
        "citenly.main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.DEBUG,
    )
