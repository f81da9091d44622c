"""Streamer roster API routes"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from streamboard.core.dependencies import get_roster_service
from streamboard.core.errors import AggregationError, ConfigError
from streamboard.models import Roster
from streamboard.services import RosterService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/streamers", tags=["streamers"])


@router.get("", response_model=Roster)
async def get_streamers(
    roster_service: RosterService = Depends(get_roster_service),
) -> Roster:
    """Get the configured channels, live first, with the default featured channel.

    The page polls this endpoint; freshness is bounded by the cache windows.
    """
    try:
        return await roster_service.build_roster()
    except AggregationError as e:
        if isinstance(e.cause, ConfigError):
            raise HTTPException(status_code=503, detail="Service not configured") from None
        raise HTTPException(status_code=502, detail="Failed to fetch streamers") from None
