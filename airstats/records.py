"""Records API functionality for reading tables of the backing store."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote as url_quote

import requests

from .exceptions import UpstreamError
from .models import Record
from .utils import handle_api_errors

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.airtable.com/v0"
PAGE_SIZE = 100


class RecordsAPI:
    """Handler for record list and record get operations on one base."""

    def __init__(self,
                 base_id: str,
                 api_key: str,
                 base_url: str = DEFAULT_API_URL,
                 timeout: float = 30,
                 max_pages: Optional[int] = None):
        """
        Initialize the records API handler.

        Args:
            base_id: Identifier of the base holding all tables
            api_key: Bearer token for the records API
            base_url: Root URL of the records API
            timeout: Per-request timeout in seconds
            max_pages: Stop paginating after this many pages (None for no limit)
        """
        self.base_id = base_id
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_pages = max_pages

    def _table_url(self, table: str) -> str:
        return f"{self.base_url}/{self.base_id}/{url_quote(table, safe='')}"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        try:
            return requests.get(url, headers=self._headers(), params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise UpstreamError(str(e))

    def list_records(self,
                     table: str,
                     view: Optional[str] = None,
                     formula: Optional[str] = None,
                     page_size: int = PAGE_SIZE) -> List[Record]:
        """
        Fetch every record of a table, following pagination offsets.

        Args:
            table: Table name or id
            view: Optional view that scopes and orders the records
            formula: Optional ``filterByFormula`` expression
            page_size: Records per page (the API maximum is 100)

        Returns:
            List of Record objects in API order
        """
        url = self._table_url(table)
        records: List[Record] = []
        offset = None
        pages = 0

        while True:
            params: Dict[str, Any] = {"pageSize": page_size}
            if view:
                params["view"] = view
            if formula:
                params["filterByFormula"] = formula
            if offset:
                params["offset"] = offset

            response = self._get(url, params)
            handle_api_errors(response)

            try:
                payload = response.json()
                records.extend(Record.from_api(r) for r in payload.get("records", []))
                offset = payload.get("offset")
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                raise UpstreamError(f"Failed to parse records response: {e}")

            pages += 1
            if not offset:
                break
            if self.max_pages is not None and pages >= self.max_pages:
                logger.warning("Stopped paginating %s after %d pages", table, pages)
                break

        logger.debug("Fetched %d records from %s", len(records), table)
        return records

    def get_record(self, table: str, record_id: str) -> Optional[Record]:
        """
        Fetch a single record by id.

        Returns:
            The Record, or None when the records API reports it missing
        """
        url = f"{self._table_url(table)}/{url_quote(record_id, safe='')}"
        response = self._get(url)
        if response.status_code == 404:
            return None
        handle_api_errors(response)

        try:
            return Record.from_api(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamError(f"Failed to parse record response: {e}")

    def find_first(self, table: str, formula: str) -> Optional[Record]:
        """First record matching ``formula``, or None."""
        records = self.list_records(table, formula=formula)
        return records[0] if records else None
