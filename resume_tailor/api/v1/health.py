from fastapi import APIRouter

from resume_tailor.core.config import settings

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check():
    return {
        "status": "healthy",
        "ai_provider": settings.ai_provider,
        "scoring_backend": settings.scoring_backend,
    }
