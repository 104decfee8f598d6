from fastapi import APIRouter

from citenly.api.routes import calendar, cron

api_router = APIRouter()

api_router.include_router(cron.router)
api_router.include_router(calendar.router)
