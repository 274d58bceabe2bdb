"""
Datasets router: listings and AI comment feeds, optionally scoped by
country, category and content hub.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from airstats.api.auth import get_client
from airstats.client import AirstatsClient

router = APIRouter(tags=["datasets"])


@router.get("/datasets")
@router.get("/titlelist", include_in_schema=False)
def list_datasets(
    country: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    content_hub: Optional[str] = Query(None, alias="contentHub"),
    lang: Optional[str] = Query(None),
    client: AirstatsClient = Depends(get_client),
):
    """All listable datasets, newest update first."""
    return client.list_datasets(country, category, content_hub, lang)


# news routes come first so "news" is never taken for a category name
@router.get("/dataset/{country}/news")
def country_news(
    country: str,
    lang: Optional[str] = Query(None),
    content_hub: Optional[str] = Query(None, alias="contentHub"),
    client: AirstatsClient = Depends(get_client),
):
    """AI comments of a country's datasets and their divisions."""
    return client.list_comments(country, None, content_hub, lang)


@router.get("/dataset/{country}/{category}/news")
def category_news(
    country: str,
    category: str,
    lang: Optional[str] = Query(None),
    content_hub: Optional[str] = Query(None, alias="contentHub"),
    client: AirstatsClient = Depends(get_client),
):
    """AI comments of one category of a country."""
    return client.list_comments(country, category, content_hub, lang)


@router.get("/dataset/{country}")
def country_datasets(
    country: str,
    lang: Optional[str] = Query(None),
    content_hub: Optional[str] = Query(None, alias="contentHub"),
    client: AirstatsClient = Depends(get_client),
):
    return client.list_datasets(country, None, content_hub, lang)


@router.get("/dataset/{country}/{category}")
def category_datasets(
    country: str,
    category: str,
    lang: Optional[str] = Query(None),
    content_hub: Optional[str] = Query(None, alias="contentHub"),
    client: AirstatsClient = Depends(get_client),
):
    return client.list_datasets(country, category, content_hub, lang)
