"""
Reference router: countries, categories and content hubs from the
cached lookup tables.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from airstats.api.auth import get_client
from airstats.client import AirstatsClient

router = APIRouter(tags=["reference"])


@router.get("/countries")
def list_countries(client: AirstatsClient = Depends(get_client)):
    return client.list_countries()


@router.get("/categories/{country}")
def list_categories(
    country: str,
    lang: Optional[str] = Query(None),
    client: AirstatsClient = Depends(get_client),
):
    """Localized category names of a country."""
    return client.list_categories(country, lang)


@router.get("/contenthubs/{country}")
def list_content_hubs(
    country: str,
    lang: Optional[str] = Query(None),
    client: AirstatsClient = Depends(get_client),
):
    """Localized content hub titles of a country."""
    return client.list_content_hubs(country, lang)
