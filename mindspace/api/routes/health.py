from fastapi import APIRouter

from mindspace.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Health endpoint for monitoring, tagged with the service name."""
    return {"status": "healthy", "service": settings.SERVICE_NAME}
