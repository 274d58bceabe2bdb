"""Main client class for the airstats package."""

import logging
from typing import Any, Callable, Dict, Optional
import time

import pandas as pd

from .assembler import RecordAssembler
from .cache import LookupCache
from .config import Settings, TableNames
from .models import DatasetDetail
from .records import DEFAULT_API_URL, RecordsAPI

logger = logging.getLogger(__name__)


class AirstatsClient:
    """
    Main client for reading localized statistical datasets.

    This class wires the records API, the lookup cache of reference tables
    and the record assembler into one interface. It is used both directly
    as a library and by the REST API.
    """

    def __init__(self,
                 base_id: str,
                 api_key: str,
                 tables: TableNames,
                 base_url: str = DEFAULT_API_URL,
                 country_views: Optional[Dict[str, str]] = None,
                 cache_ttl_seconds: float = 3600,
                 timeout: float = 30,
                 max_pages: Optional[int] = None,
                 records: Optional[RecordsAPI] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the client.

        Args:
            base_id: Identifier of the base holding all tables
            api_key: Bearer token for the records API
            tables: Names of the tables to read
            base_url: Root URL of the records API
            country_views: Optional country name -> view name scoping
            cache_ttl_seconds: Freshness window of the lookup cache
            timeout: Per-request timeout in seconds
            max_pages: Pagination guard for list requests (None for no limit)
            records: Records API to use instead of building one
            clock: Time source of the lookup cache
        """
        self.base_url = base_url
        self.tables = tables

        self.records = records or RecordsAPI(
            base_id, api_key, base_url=base_url, timeout=timeout, max_pages=max_pages
        )
        self.cache = LookupCache(
            self.records,
            categories_table=tables.categories,
            content_hubs_table=tables.content_hubs,
            comments_table=tables.comments,
            divisions_table=tables.divisions,
            ttl_seconds=cache_ttl_seconds,
            clock=clock,
        )
        self.assembler = RecordAssembler(self.records, self.cache, tables, country_views)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "AirstatsClient":
        """Build a client from process settings."""
        return cls(
            settings.base_id,
            settings.api_key,
            settings.tables,
            base_url=settings.api_url,
            country_views=settings.country_views,
            cache_ttl_seconds=settings.cache_ttl_seconds,
            timeout=settings.request_timeout,
            max_pages=settings.max_pages,
            **kwargs,
        )

    def get_dataset(self, identifier: str, lang: Optional[str] = None) -> DatasetDetail:
        """
        Get a dataset (or ``d``-prefixed division) with its parsed data table.

        Args:
            identifier: DataID, ``d`` + DivisionID, or record id
            lang: Two-letter language code (defaults to English)

        Returns:
            DatasetDetail object
        """
        return self.assembler.get_dataset(identifier, lang)

    def get_dataset_meta(self, identifier: str, lang: Optional[str] = None) -> DatasetDetail:
        """Like ``get_dataset`` but without parsing the data table."""
        return self.assembler.get_dataset(identifier, lang, include_data=False)

    def get_dataset_by_title(self, title: str, lang: Optional[str] = None) -> DatasetDetail:
        """Get a dataset by its English title (case-insensitive)."""
        return self.assembler.get_dataset_by_title(title, lang)

    def get_unified(self, identifier: str, lang: Optional[str] = None) -> Dict[str, Any]:
        """Get a dataset together with its divisions and their merged comments."""
        return self.assembler.get_unified(identifier, lang)

    def list_datasets(self,
                      country: Optional[str] = None,
                      category: Optional[str] = None,
                      content_hub: Optional[str] = None,
                      lang: Optional[str] = None) -> Dict[str, Any]:
        """
        List datasets, most recently updated first.

        Examples:
            # Everything, in English
            client.list_datasets()

            # Polish economy datasets, titles in German
            client.list_datasets(country='poland', category='economy', lang='de')
        """
        return self.assembler.list_datasets(country, category, content_hub, lang)

    def list_comments(self,
                      country: Optional[str] = None,
                      category: Optional[str] = None,
                      content_hub: Optional[str] = None,
                      lang: Optional[str] = None) -> Dict[str, Any]:
        """AI comments of the datasets ``list_datasets`` would return."""
        return self.assembler.list_comments(country, category, content_hub, lang)

    def list_countries(self) -> Dict[str, Any]:
        return self.assembler.list_countries()

    def list_categories(self, country: str, lang: Optional[str] = None) -> Dict[str, Any]:
        return self.assembler.list_categories(country, lang)

    def list_content_hubs(self, country: str, lang: Optional[str] = None) -> Dict[str, Any]:
        return self.assembler.list_content_hubs(country, lang)

    def get_data_as_dataframe(self, identifier: str, lang: Optional[str] = None) -> pd.DataFrame:
        """
        Get a dataset's data table as a pandas DataFrame.

        Args:
            identifier: DataID, ``d`` + DivisionID, or record id
            lang: Language of the column headers

        Returns:
            pandas DataFrame with one row per table line, ``year`` first
        """
        detail = self.get_dataset(identifier, lang)
        df = pd.DataFrame(detail.data or [])
        if "year" in df.columns:
            df = df[["year"] + [c for c in df.columns if c != "year"]]
        return df

    def clear_cache(self) -> None:
        """Clear all cached reference tables."""
        self.cache.invalidate()
        logger.info("Cache cleared successfully.")
