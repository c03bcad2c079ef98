from fastapi import APIRouter
from school_eval.api.v1.endpoints import health, standards, indicators, checklist_items, evidence, users, admin

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(standards.router)
api_router.include_router(indicators.router)
api_router.include_router(checklist_items.router)
api_router.include_router(evidence.router)
api_router.include_router(users.router)
api_router.include_router(admin.router)
