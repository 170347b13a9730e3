"""
Health check endpoints for diagnosing service dependencies.
"""
from fastapi import APIRouter, Depends

from quickink.config import get_settings, Settings
from quickink.pdf.context import FontSet

router = APIRouter(
    prefix="/health",
    tags=["health"],
)


@router.get("")
async def health_check(settings: Settings = Depends(get_settings)):
    """Basic liveness check."""
    return {
        "status": "ok",
        "service": f"{settings.product_name} signed documents",
        "environment": settings.environment,
    }


@router.get("/fonts")
async def health_check_fonts(settings: Settings = Depends(get_settings)):
    """
    Report which TTF fonts the generator will embed.
    Useful for diagnosing missing diacritics in signed documents.
    """
    fonts = FontSet.discover() if settings.use_system_fonts else FontSet()
    return {
        "use_system_fonts": settings.use_system_fonts,
        "regular": fonts.regular,
        "bold": fonts.bold,
        "fallback": "Helvetica" if fonts.regular is None else None,
    }
