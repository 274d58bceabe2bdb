"""Configuration loading from the environment (and an optional .env file)."""

import json
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .records import DEFAULT_API_URL


@dataclass
class TableNames:
    """Names of the backing-store tables read by the service."""
    datasets: str
    categories: Optional[str] = "Categories"
    content_hubs: Optional[str] = "ContentHubs"
    comments: Optional[str] = "Comments"
    divisions: Optional[str] = None
    metadata: Optional[str] = None


@dataclass
class Settings:
    """Process settings for the client and the API server."""
    api_key: str
    base_id: str
    tables: TableNames
    api_url: str = DEFAULT_API_URL
    private_api_key: Optional[str] = None
    country_views: Dict[str, str] = field(default_factory=dict)
    cache_ttl_seconds: float = 3600
    request_timeout: float = 30
    max_pages: Optional[int] = None
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env_file: Optional path of a .env file to load first (existing
                environment variables take precedence)

        Returns:
            Settings instance
        """
        load_dotenv(env_file)
        env = os.environ

        datasets_table = env.get("AIRTABLE_TABLE_NAME")
        if not datasets_table:
            raise ConfigurationError("AIRTABLE_TABLE_NAME must be set")

        tables = TableNames(
            datasets=datasets_table,
            categories=env.get("AIRTABLE_CATEGORIES_TABLE", "Categories") or None,
            content_hubs=env.get("AIRTABLE_CONTENT_HUBS_TABLE", "ContentHubs") or None,
            comments=env.get("AIRTABLE_COMMENTS_TABLE", "Comments") or None,
            divisions=env.get("AIRTABLE_DIVISIONS_TABLE") or None,
            metadata=env.get("AIRTABLE_METADATA_TABLE") or None,
        )

        views_raw = env.get("AIRTABLE_COUNTRY_VIEWS")
        try:
            country_views = json.loads(views_raw) if views_raw else {}
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"AIRTABLE_COUNTRY_VIEWS is not valid JSON: {e}")
        if not isinstance(country_views, dict):
            raise ConfigurationError("AIRTABLE_COUNTRY_VIEWS must be a JSON object")

        max_pages = env.get("MAX_PAGES")

        return cls(
            api_key=env.get("AIRTABLE_API_KEY", ""),
            base_id=env.get("AIRTABLE_BASE_ID", ""),
            tables=tables,
            api_url=env.get("AIRTABLE_API_URL", DEFAULT_API_URL),
            private_api_key=env.get("PRIVATE_API_KEY") or None,
            country_views={str(k): str(v) for k, v in country_views.items()},
            cache_ttl_seconds=float(env.get("CACHE_TTL_SECONDS", 3600)),
            request_timeout=float(env.get("REQUEST_TIMEOUT", 30)),
            max_pages=int(max_pages) if max_pages else None,
            port=int(env.get("PORT", 3000)),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
