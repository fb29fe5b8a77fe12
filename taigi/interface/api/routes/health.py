"""Health check routes."""

from datetime import datetime

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from taigi.config import Settings
from taigi.domain.service import VoteChannel

router = APIRouter(tags=["health"], route_class=DishkaRoute)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    version: str
    git_sha: str
    realtime_channel: str


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: FromDishka[Settings], vote_channel: FromDishka[VoteChannel]
) -> HealthResponse:
    """Basic health check endpoint.

    Returns:
        Health status indicating the service is running
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(),
        version="0.1.0",
        git_sha=settings.git_sha,
        realtime_channel=vote_channel.name,
    )
