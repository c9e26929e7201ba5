"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from salon.presentation.api.v1.endpoints.health import router as health_router
from salon.presentation.api.v1.endpoints.clients import router as clients_router
from salon.presentation.api.v1.endpoints.services import router as services_router
from salon.presentation.api.v1.endpoints.appointments import router as appointments_router
from salon.presentation.api.v1.endpoints.calendar import router as calendar_router
from salon.presentation.api.v1.endpoints.events import router as events_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(clients_router)
router.include_router(services_router)
router.include_router(appointments_router)
router.include_router(calendar_router)
router.include_router(events_router)
