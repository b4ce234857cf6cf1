"""Health check endpoint."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health_check(request: Request) -> dict[str, object]:
    """Return application and generation catalog status."""
    service = getattr(request.app.state, "generation_service", None)
    if service is None:
        return {"status": "starting", "archetypes": 0, "affixes": 0}
    factory = service.factory
    return {
        "status": "ok",
        "archetypes": factory.catalog.count(),
        "affixes": factory.affix_library.count(),
    }
