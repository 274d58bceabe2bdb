"""
airstats - localized statistical datasets served from a records table service

This package reads dataset records and their categories, content hubs,
AI comments, metadata and divisions from a hosted records table service,
and assembles them into language-aware JSON documents. The ``airstats.api``
subpackage exposes them as a read-only REST API.
"""

from .client import AirstatsClient
from .config import Settings, TableNames
from .exceptions import (
    AirstatsError, RecordNotFoundError, InvalidParameterError,
    UpstreamError, ConfigurationError,
)
from .models import Record, DatasetDetail, DatasetSummary

__version__ = "0.1.0"

__all__ = [
    "AirstatsClient",
    "Settings",
    "TableNames",
    "Record",
    "DatasetDetail",
    "DatasetSummary",
    "AirstatsError",
    "RecordNotFoundError",
    "InvalidParameterError",
    "UpstreamError",
    "ConfigurationError",
]
