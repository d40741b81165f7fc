"""
Health Check Endpoint
"""
from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_class=PlainTextResponse)
async def health_check(request: Request) -> PlainTextResponse:
    """Plain-text liveness check; 503 when the database cannot be queried."""
    if not await request.app.state.db.ping():
        return PlainTextResponse("Database unavailable", status_code=503)
    return PlainTextResponse("OK")
