"""Data models for the airstats package."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any


@dataclass
class Record:
    """A single row of a records table: its id and raw field set."""
    id: str
    fields: Dict[str, Any] = field(default_factory=dict)
    created_time: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Record":
        """Build a Record from the JSON object returned by the records API."""
        return cls(
            id=payload["id"],
            fields=payload.get("fields") or {},
            created_time=payload.get("createdTime"),
        )

    def links(self, name: str) -> List[str]:
        """Linked record ids stored in a link field (empty when unset)."""
        value = self.fields.get(name)
        if not value:
            return []
        if isinstance(value, list):
            return [str(v) for v in value if v]
        return [str(value)]

    def link(self, name: str) -> Optional[str]:
        """The single linked record id of an at-most-one link field."""
        linked = self.links(name)
        return linked[0] if linked else None


@dataclass
class DatasetSummary:
    """One item of a dataset listing."""
    id: Any
    title: str
    description: str = ""
    category: str = ""
    country: Optional[str] = None
    last_update: str = ""
    next_update_time: str = ""

    def to_dict(self) -> Dict[str, Any]:
        meta = {
            "title": self.title,
            "description": self.description,
            "category": self.category,
        }
        if self.country:
            meta["country"] = self.country
        meta["lastUpdate"] = self.last_update
        meta["nextUpdateTime"] = self.next_update_time
        return {"id": self.id, "meta": meta}


@dataclass
class DatasetDetail:
    """A fully assembled dataset: localized metadata, parsed rows and translations."""
    meta: Dict[str, Any]
    data: Optional[List[Dict[str, Any]]] = None  # None for the metadata-only variant
    translations: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"meta": self.meta}
        if self.data is None:
            return result
        result["data"] = self.data
        result["translations"] = self.translations
        return result
