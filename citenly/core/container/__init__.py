# ============================================================================
# SCOPE: GLOBAL
# Description: Contenedor principal de inyección de dependencias (singleton).
#              Compone los sub-contenedores de dominio.
# Tenant-Aware: No - los servicios reciben la clínica en cada llamada.
# ============================================================================
"""
Dependency Injection Container.

Centralized container for creating and managing all application dependencies.
This module is the facade that composes all domain-specific containers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from citenly.config.settings import Settings

from .base import BaseContainer
from .calendar import CalendarContainer
from .reminders import RemindersContainer

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from citenly.domains.calendar.application.use_cases import (
        CalendarGateway,
        CredentialRefresher,
        StoreCalendarTokensUseCase,
    )
    from citenly.domains.calendar.infrastructure.repositories import SQLAlchemyCredentialRepository
    from citenly.domains.reminders.application.use_cases import SchedulerRun
    from citenly.domains.reminders.infrastructure.scheduler import HourlyReminderScheduler

logger = logging.getLogger(__name__)


class DependencyContainer:
    """
    Dependency Injection Container (Facade).

    Single Responsibility: Compose and delegate to domain-specific containers.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ):
        self._base = BaseContainer(settings, session_factory)
        self._reminders = RemindersContainer(self._base)
        self._calendar = CalendarContainer(self._base)

        logger.info("DependencyContainer initialized with all domain containers")

    @property
    def settings(self) -> Settings:
        return self._base.settings

    # ============================================================
    # REMINDERS DOMAIN
    # ============================================================

    def create_scheduler_run(self) -> SchedulerRun:
        return self._reminders.create_scheduler_run()

    def get_hourly_scheduler(self) -> HourlyReminderScheduler:
        return self._reminders.get_hourly_scheduler()

    # ============================================================
    # CALENDAR DOMAIN
    # ============================================================

    def create_credential_repository(self) -> SQLAlchemyCredentialRepository:
        return self._calendar.create_credential_repository()

    def get_credential_refresher(self) -> CredentialRefresher:
        return self._calendar.get_credential_refresher()

    def create_calendar_gateway(self) -> CalendarGateway:
        return self._calendar.create_calendar_gateway()

    def create_store_tokens_use_case(self) -> StoreCalendarTokensUseCase:
        return self._calendar.create_store_tokens_use_case()


# ============================================================
# GLOBAL CONTAINER INSTANCE
# ============================================================

_container: DependencyContainer | None = None


def get_container() -> DependencyContainer:
    """
    Get global container instance (singleton).

    Returns:
        DependencyContainer instance
    """
    global _container

    if _container is None:
        logger.info("Initializing global DependencyContainer")
        _container = DependencyContainer()

    return _container


def reset_container() -> None:
    """
    Reset global container instance.

    Useful for testing or reconfiguration.
    """
    global _container
    logger.info("Resetting global DependencyContainer")
    _container = None


__all__ = [
    "BaseContainer",
    "CalendarContainer",
    "DependencyContainer",
    "RemindersContainer",
    "get_container",
    "reset_container",
]
