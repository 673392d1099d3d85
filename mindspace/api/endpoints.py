from fastapi import APIRouter

from mindspace.api.routes import health, journal


router = APIRouter()

router.include_router(journal.router)
router.include_router(health.router)
