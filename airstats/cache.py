"""In-memory cache of the reference tables joined into dataset responses."""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from .exceptions import AirstatsError, ConfigurationError
from .localization import CANONICAL_LANGUAGE, localized_value
from .records import RecordsAPI
from .utils import normalize_text

logger = logging.getLogger(__name__)

CATEGORIES = "categories"
CONTENT_HUBS = "content_hubs"
COMMENTS = "comments"
DIVISIONS = "divisions"

FieldMap = Dict[str, Dict[str, Any]]


class LookupCache:
    """
    TTL cache of the category, content hub, comment and division tables.

    Each table is held as a mapping of record id to field set. All four share
    one "last loaded" timestamp: reloading any table makes every table count
    as fresh for another ``ttl_seconds``. A stale or empty table is reloaded
    in full on its next access; ``invalidate`` drops everything at once.
    """

    def __init__(self,
                 records: RecordsAPI,
                 categories_table: Optional[str],
                 content_hubs_table: Optional[str],
                 comments_table: Optional[str],
                 divisions_table: Optional[str] = None,
                 ttl_seconds: float = 3600,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the lookup cache.

        Args:
            records: Records API used to load the tables
            categories_table: Categories table name
            content_hubs_table: Content hubs table name
            comments_table: AI comments table name
            divisions_table: Divisions table name; None disables divisions
            ttl_seconds: Seconds a load keeps the cache fresh
            clock: Monotonic time source, replaceable in tests
        """
        self.records = records
        self.tables = {
            CATEGORIES: categories_table,
            CONTENT_HUBS: content_hubs_table,
            COMMENTS: comments_table,
            DIVISIONS: divisions_table,
        }
        self.ttl_seconds = ttl_seconds
        self.clock = clock

        self._maps: Dict[str, Optional[FieldMap]] = {name: None for name in self.tables}
        self._locks = {name: threading.Lock() for name in self.tables}
        self._loaded_at: Optional[float] = None
        self._category_index: Dict[str, List[str]] = {}
        self._content_hub_index: Dict[str, str] = {}

    @property
    def loaded_at(self) -> Optional[float]:
        return self._loaded_at

    def is_stale(self) -> bool:
        """True when nothing was loaded yet or the last load is older than the TTL."""
        if self._loaded_at is None:
            return True
        return self.clock() - self._loaded_at >= self.ttl_seconds

    def get_categories(self) -> FieldMap:
        """Category records by record id."""
        return self._get(CATEGORIES)

    def get_content_hubs(self) -> FieldMap:
        """Content hub records by record id."""
        return self._get(CONTENT_HUBS)

    def get_comments(self) -> FieldMap:
        """AI comment records by record id."""
        return self._get(COMMENTS)

    def get_divisions(self) -> FieldMap:
        """Division records by record id; empty when the table is unavailable."""
        return self._get(DIVISIONS)

    def get_category_index(self) -> Dict[str, List[str]]:
        """Category record ids keyed by normalized English category name."""
        self.get_categories()
        return self._category_index

    def get_content_hub_index(self) -> Dict[str, str]:
        """Content hub record id keyed by normalized English title (first wins)."""
        self.get_content_hubs()
        return self._content_hub_index

    def invalidate(self) -> None:
        """Drop all cached tables; the next access reloads synchronously."""
        for name in self._maps:
            self._maps[name] = None
        self._category_index = {}
        self._content_hub_index = {}
        self._loaded_at = None
        logger.info("Lookup cache invalidated")

    def _get(self, name: str) -> FieldMap:
        current = self._maps[name]
        if current is not None and not self.is_stale():
            return current

        with self._locks[name]:
            current = self._maps[name]
            if current is not None and not self.is_stale():
                return current
            fresh = self._load(name)
            self._maps[name] = fresh
            self._loaded_at = self.clock()
            return fresh

    def _load(self, name: str) -> FieldMap:
        table = self.tables[name]

        if name == DIVISIONS:
            if not table:
                return {}
            try:
                records = self.records.list_records(table)
            except AirstatsError as e:
                logger.warning("Divisions table %r unavailable, serving no divisions: %s", table, e)
                return {}
        else:
            if not table:
                raise ConfigurationError(f"No table configured for {name}")
            records = self.records.list_records(table)

        mapping = {record.id: record.fields for record in records}

        if name == CATEGORIES:
            self._category_index = self._build_category_index(mapping)
        elif name == CONTENT_HUBS:
            self._content_hub_index = self._build_content_hub_index(mapping)

        logger.info("Loaded %d %s records", len(mapping), name)
        return mapping

    @staticmethod
    def _build_category_index(mapping: FieldMap) -> Dict[str, List[str]]:
        index: Dict[str, List[str]] = {}
        for record_id, fields in mapping.items():
            key = normalize_text(localized_value(fields, "Secondary", CANONICAL_LANGUAGE))
            if key:
                index.setdefault(key, []).append(record_id)
        return index

    @staticmethod
    def _build_content_hub_index(mapping: FieldMap) -> Dict[str, str]:
        index: Dict[str, str] = {}
        for record_id, fields in mapping.items():
            key = normalize_text(localized_value(fields, "Title", CANONICAL_LANGUAGE))
            if key and key not in index:
                index[key] = record_id
        return index
