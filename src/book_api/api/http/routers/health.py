from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from book_api.api.http.deps import get_database_service
from book_api.core.services import DbSessionService

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    """Liveness check; does not touch the database."""
    return {"status": "healthy"}


@router.get("/ready")
def readiness(database_service: DbSessionService = Depends(get_database_service)):
    """Readiness check: the database must answer a trivial query."""
    if not database_service.health_check():
        return JSONResponse(
            status_code=503, content={"error": True, "reason": "Database unavailable"}
        )
    return {"status": "ready"}
