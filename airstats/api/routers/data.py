"""
Data router: single dataset/division documents and the unified view.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from airstats.api.auth import get_client, require_api_key
from airstats.client import AirstatsClient

router = APIRouter(tags=["data"])


@router.get("/data/{identifier}")
def get_data(
    identifier: str,
    lang: Optional[str] = Query(None),
    client: AirstatsClient = Depends(get_client),
):
    """Localized meta, parsed data rows and translations of one dataset.

    ``identifier`` is a DataID (``123``) or a division id (``d123``).
    """
    return client.get_dataset(identifier, lang).to_dict()


@router.get("/data/{identifier}/meta")
def get_data_meta(
    identifier: str,
    lang: Optional[str] = Query(None),
    client: AirstatsClient = Depends(get_client),
):
    """Only the localized meta block, without the data table."""
    return client.get_dataset_meta(identifier, lang).to_dict()


@router.get("/unified/{identifier}")
def get_unified(
    identifier: str,
    lang: Optional[str] = Query(None),
    client: AirstatsClient = Depends(get_client),
):
    """A dataset with all of its divisions and their merged AI comments."""
    return client.get_unified(identifier, lang)


@router.get("/title/{title}", dependencies=[Depends(require_api_key)])
def get_by_title(
    title: str,
    lang: Optional[str] = Query(None),
    client: AirstatsClient = Depends(get_client),
):
    """Dataset looked up by its English title (requires the API key)."""
    return client.get_dataset_by_title(title, lang).to_dict()
