# ============================================================================
# SCOPE: GLOBAL
# Description: Dependencias FastAPI para inyección (contenedor, casos de uso,
#              identidad del usuario y autenticación del trigger cron).
# ============================================================================
import hmac
import logging

from fastapi import Depends, Header, HTTPException, status

from citenly.config.settings import Settings, get_settings
from citenly.core.container import DependencyContainer, get_container
from citenly.domains.calendar.application.use_cases import CalendarGateway, StoreCalendarTokensUseCase
from citenly.domains.reminders.application.use_cases import SchedulerRun

logger = logging.getLogger(__name__)


def get_di_container() -> DependencyContainer:
    """Get Dependency Injection Container singleton."""
    return get_container()


def get_scheduler_run(
    container: DependencyContainer = Depends(get_di_container),  # noqa: B008
) -> SchedulerRun:
    return container.create_scheduler_run()


def get_calendar_gateway(
    container: DependencyContainer = Depends(get_di_container),  # noqa: B008
) -> CalendarGateway:
    return container.create_calendar_gateway()


def get_store_tokens_use_case(
    container: DependencyContainer = Depends(get_di_container),  # noqa: B008
) -> StoreCalendarTokensUseCase:
    return container.create_store_tokens_use_case()


async def get_current_user_id(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
) -> str:
    """Identity of the caller, set by the upstream gateway."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id.strip()


async def verify_cron_secret(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> None:
    """Require ``Authorization: Bearer <CRON_SECRET>`` when a secret is configured."""
    if not settings.CRON_SECRET:
        return

    expected = f"Bearer {settings.CRON_SECRET}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        logger.warning("Rejected reminder trigger with invalid cron secret")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid cron secret",
        )
