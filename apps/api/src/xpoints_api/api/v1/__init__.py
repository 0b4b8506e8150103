from fastapi import APIRouter

from .endpoints import (
    conversions,
    exchange_rates,
    health,
    observability,
    programs,
    rewards,
    users,
)

router = APIRouter()
router.include_router(health.router, tags=["Health"])
router.include_router(programs.router)
router.include_router(rewards.router)
router.include_router(exchange_rates.router)
router.include_router(conversions.router)
router.include_router(users.router)
router.include_router(observability.router)
