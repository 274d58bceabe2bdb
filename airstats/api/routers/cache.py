"""
Cache router: operator-triggered reset of the lookup cache.
"""

from fastapi import APIRouter, Depends

from airstats.api.auth import get_client, require_api_key
from airstats.client import AirstatsClient

router = APIRouter(tags=["cache"])


@router.post("/cache/refresh", dependencies=[Depends(require_api_key)])
def refresh_cache(client: AirstatsClient = Depends(get_client)):
    """Drop every cached lookup table; the next request reloads them."""
    client.clear_cache()
    return {"success": True, "message": "Cache cleared"}
