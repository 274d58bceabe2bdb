"""Assembly of localized dataset responses from the records tables."""

import logging
import re
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import formulas
from .cache import LookupCache
from .config import TableNames
from .exceptions import AirstatsError, InvalidParameterError, RecordNotFoundError
from .localization import (
    CANONICAL_LANGUAGE, METADATA_TEXT_FIELDS, collect_translations,
    localized_field, localized_value, normalize_language,
)
from .models import DatasetDetail, DatasetSummary, Record
from .records import RecordsAPI
from .resolvers import (
    categories_for_country, category_country, category_id, category_ids_by_name,
    category_name, content_hub_id, content_hub_titles, content_hubs_for_country,
    countries, country_display_name, linked_divisions,
)
from .utils import first_text, normalize_text, parse_datetime, parse_table, text_value

logger = logging.getLogger(__name__)

DATA_ID = "data_id"
DIVISION_ID = "division_id"
RECORD_ID = "record_id"

_NUMERIC_ID = re.compile(r"[0-9]+")
_DIVISION_ID = re.compile(r"[dD]([0-9]+)")
_RECORD_ID = re.compile(r"rec[A-Za-z0-9]+")

# camelCase response key for each metadata base name
_METADATA_KEYS = {
    "Definitions": "definitions",
    "ResearchName": "researchName",
    "ResearchPurpose": "researchPurpose",
    "Methodology": "methodology",
    "SourceName": "sourceName",
    "Unit": "unit",
}

# Meta keys a division takes from its parent dataset when it has no value
_INHERITED_KEYS = ("updateFrequency", "sourceName", "unit", "lastUpdate", "nextUpdateTime")


def parse_identifier(identifier: str) -> Tuple[str, Any]:
    """
    Classify a dataset identifier from a request path.

    Args:
        identifier: ``123`` (DataID), ``d123`` (division DivisionID) or a
            ``rec...`` record id

    Returns:
        Tuple of (kind, value) where kind is DATA_ID, DIVISION_ID or RECORD_ID

    Raises:
        InvalidParameterError: if the identifier matches none of the forms
    """
    ident = (identifier or "").strip()
    if _NUMERIC_ID.fullmatch(ident):
        return DATA_ID, int(ident)
    match = _DIVISION_ID.fullmatch(ident)
    if match:
        return DIVISION_ID, int(match.group(1))
    if _RECORD_ID.fullmatch(ident):
        return RECORD_ID, ident
    raise InvalidParameterError(f"Invalid dataset id '{identifier}'")


def _update_sort_key(record: Record) -> date:
    # unparseable dates sort as the oldest
    parsed = parse_datetime(record.fields.get("UpdatedThere"))
    return parsed.date() if parsed else date.min


class RecordAssembler:
    """Builds the detail, listing, news and unified responses."""

    def __init__(self,
                 records: RecordsAPI,
                 cache: LookupCache,
                 tables: TableNames,
                 country_views: Optional[Dict[str, str]] = None):
        self.records = records
        self.cache = cache
        self.tables = tables
        self.country_views = country_views or {}

    # --- Single record ---

    def get_dataset(self, identifier: str, lang: Optional[str] = None,
                    include_data: bool = True) -> DatasetDetail:
        """
        Assemble one dataset or division.

        Args:
            identifier: DataID, ``d``-prefixed DivisionID or record id
            lang: Requested language code
            include_data: False for the metadata-only variant

        Returns:
            DatasetDetail with localized meta, parsed rows and translations
        """
        kind, value = parse_identifier(identifier)
        if kind == DIVISION_ID:
            record = self._find_division(value, identifier)
            return self._division_detail(record, lang, include_data)
        record = self._find_dataset(kind, value, identifier)
        return self._dataset_detail(record, lang, include_data)

    def get_dataset_by_title(self, title: str, lang: Optional[str] = None) -> DatasetDetail:
        """Assemble the dataset whose English title equals ``title`` (any case)."""
        record = self.records.find_first(
            self.tables.datasets, formulas.equals_ignore_case("TitleEN", title.strip())
        )
        if record is None:
            raise RecordNotFoundError(f'No data found for "{title}"')
        return self._dataset_detail(record, lang, include_data=True)

    def get_unified(self, identifier: str, lang: Optional[str] = None) -> Dict[str, Any]:
        """
        Assemble a dataset together with all of its divisions.

        Args:
            identifier: Numeric DataID of the parent dataset
            lang: Requested language code

        Returns:
            Dictionary with the parent's meta, data and translations, a
            ``divisions`` list and the merged ``comments`` of all of them
        """
        ident = (identifier or "").strip()
        if not _NUMERIC_ID.fullmatch(ident):
            raise InvalidParameterError(f"Invalid numeric id '{identifier}'")

        record = self._find_dataset(DATA_ID, int(ident), identifier)
        detail = self._dataset_detail(record, lang, include_data=True)

        comments = []
        if detail.meta.get("aiComment"):
            comments.append(detail.meta["aiComment"])

        divisions = []
        for division_id, fields in linked_divisions(self.cache, record.id).items():
            division = self._division_detail(
                Record(id=division_id, fields=fields), lang, include_data=True, parent=record
            )
            divisions.append({
                "id": division.meta["id"],
                "meta": division.meta,
                "data": division.data,
            })
            if division.meta.get("aiComment"):
                comments.append(division.meta["aiComment"])

        result = detail.to_dict()
        result["divisions"] = divisions
        result["comments"] = comments
        return result

    # --- Collections ---

    def list_datasets(self,
                      country: Optional[str] = None,
                      category: Optional[str] = None,
                      content_hub: Optional[str] = None,
                      lang: Optional[str] = None) -> Dict[str, Any]:
        """
        List datasets, newest update first.

        Args:
            country: Free-text country; limits the list to that country
            category: Category name; resolved within ``country`` when given
            content_hub: Content hub title
            lang: Requested language code

        Returns:
            ``{"count": n, "items": [...]}``
        """
        records, country_name = self._select_datasets(country, category, content_hub)
        items = [self._summary(record, lang, country_name).to_dict() for record in records]
        return {"count": len(items), "items": items}

    def list_comments(self,
                      country: Optional[str] = None,
                      category: Optional[str] = None,
                      content_hub: Optional[str] = None,
                      lang: Optional[str] = None,
                      include_divisions: bool = True) -> Dict[str, Any]:
        """
        Collect the localized AI comments of the selected datasets.

        Datasets are selected and ordered exactly like ``list_datasets``. The
        comments of each dataset's divisions follow the dataset's own comment.
        Empty comments are left out.
        """
        records, _ = self._select_datasets(country, category, content_hub)
        comment_records = self.cache.get_comments()

        comments = []
        for record in records:
            text = self._record_comment(record, comment_records, lang)
            if text:
                comments.append(text)
            if not include_divisions:
                continue
            for fields in linked_divisions(self.cache, record.id).values():
                text = localized_value(fields, "AIComment", lang)
                if text:
                    comments.append(text)

        return {"count": len(comments), "comments": comments}

    def list_countries(self) -> Dict[str, Any]:
        names = countries(self.cache)
        return {"count": len(names), "countries": names}

    def list_categories(self, country: str, lang: Optional[str] = None) -> Dict[str, Any]:
        """Localized category names for a country."""
        country_name = self._known_country(country)
        names = categories_for_country(self.cache, country_name, lang)
        return {"count": len(names), "categories": names}

    def list_content_hubs(self, country: str, lang: Optional[str] = None) -> Dict[str, Any]:
        """Localized content hub titles for a country."""
        country_name = self._known_country(country)
        titles = content_hubs_for_country(self.cache, country_name, lang)
        return {"count": len(titles), "contentHubs": titles}

    # --- Resolution helpers ---

    def _known_country(self, country: str) -> str:
        country_name = country_display_name(country)
        wanted = normalize_text(country_name)
        if not any(normalize_text(name) == wanted for name in countries(self.cache)):
            raise RecordNotFoundError(f"Country '{country_name}' not found")
        return country_name

    def _find_dataset(self, kind: str, value: Any, identifier: str) -> Record:
        if kind == DATA_ID:
            record = self.records.find_first(self.tables.datasets, formulas.equals("DataID", value))
        else:
            record = self.records.get_record(self.tables.datasets, value)
        if record is None:
            raise RecordNotFoundError(f"No dataset found for id '{identifier}'")
        return record

    def _find_division(self, number: int, identifier: str) -> Record:
        record = None
        if self.tables.divisions:
            record = self.records.find_first(
                self.tables.divisions, formulas.equals("DivisionID", number)
            )
        if record is None:
            raise RecordNotFoundError(f"No division found for id '{identifier}'")
        return record

    def _select_datasets(self,
                         country: Optional[str],
                         category: Optional[str],
                         content_hub: Optional[str]) -> Tuple[List[Record], Optional[str]]:
        country_name = country_display_name(country) if country else None
        clauses = []

        if category:
            if country_name:
                found = category_id(self.cache, category, country_name)
                if not found:
                    raise RecordNotFoundError(
                        f"Category '{category}' not found for country '{country_name}'"
                    )
                category_ids = [found]
            else:
                category_ids = category_ids_by_name(self.cache, category)
                if not category_ids:
                    raise RecordNotFoundError(f"Category '{category}' not found")
            clauses.append(formulas.any_of(
                *[formulas.link_contains("CategoryID", c) for c in category_ids]
            ))

        if content_hub:
            hub_id = content_hub_id(self.cache, content_hub)
            if not hub_id:
                raise RecordNotFoundError(f"Content hub '{content_hub}' not found")
            clauses.append(formulas.link_contains("ContentHubID", hub_id))

        view = self.country_views.get(country_name) if country_name else None
        records = self.records.list_records(
            self.tables.datasets, view=view, formula=formulas.all_of(*clauses)
        )

        records = [
            r for r in records
            if localized_value(r.fields, "Title", CANONICAL_LANGUAGE).strip()
        ]

        if country_name and not view:
            wanted = normalize_text(country_name)
            records = [
                r for r in records
                if normalize_text(category_country(self.cache, r.link("Category"))) == wanted
            ]

        records.sort(key=_update_sort_key, reverse=True)
        return records, country_name

    def _optional(self, description: str, func: Callable, *args):
        """Run an enrichment lookup; None when it fails."""
        try:
            return func(*args)
        except AirstatsError as e:
            logger.warning("Skipping %s: %s", description, e)
            return None

    def _metadata_fields(self, record: Optional[Record]) -> Dict[str, Any]:
        if record is None or not self.tables.metadata:
            return {}
        metadata_id = record.link("Metadata")
        if not metadata_id:
            return {}
        metadata = self._optional(
            f"metadata {metadata_id}", self.records.get_record, self.tables.metadata, metadata_id
        )
        return metadata.fields if metadata else {}

    def _comment_fields(self, record: Record) -> Dict[str, Any]:
        comment_id = record.link("Comment")
        if not comment_id:
            return {}
        comment_records = self._optional("comments", self.cache.get_comments) or {}
        return comment_records.get(comment_id) or {}

    def _record_comment(self, record: Record, comment_records: Dict[str, Dict],
                        lang: Optional[str]) -> str:
        comment_id = record.link("Comment")
        text = localized_value(comment_records.get(comment_id) or {}, "AIComment", lang)
        return text or localized_value(record.fields, "AIComment", lang)

    def _category(self, record: Optional[Record], lang: Optional[str]) -> Tuple[str, str]:
        """(localized category name, country) of a record."""
        if record is None:
            return "", ""
        linked = record.link("Category")
        name = category_name(self.cache, linked, lang)
        country = category_country(self.cache, linked)
        if not name:
            name = first_text(record.fields.get("CategoryView"))
        return name, country

    # --- Response builders ---

    def _summary(self, record: Record, lang: Optional[str],
                 country_name: Optional[str]) -> DatasetSummary:
        fields = record.fields
        name, country = self._category(record, lang)
        return DatasetSummary(
            id=self._public_id(record),
            title=localized_value(fields, "Title", lang),
            description=localized_value(fields, "Description", lang),
            category=name,
            country=country or country_name,
            last_update=text_value(fields.get("UpdatedThere")),
            next_update_time=text_value(fields.get("NextUpdateTime")),
        )

    @staticmethod
    def _public_id(record: Record, division: bool = False) -> Any:
        if division:
            number = record.fields.get("DivisionID")
            return f"d{number}" if number not in (None, "") else record.id
        number = record.fields.get("DataID")
        return number if number not in (None, "") else record.id

    def _metadata_values(self, record: Record, lang: Optional[str]) -> Tuple[Dict[str, str], Dict[str, str]]:
        """Metadata meta values of a record plus the metadata translations."""
        fields = record.fields
        metadata_fields = self._metadata_fields(record)

        values = {}
        surfaced = set()
        for base_name, key in _METADATA_KEYS.items():
            field_key, value = localized_field(metadata_fields, base_name, lang)
            if value:
                surfaced.add(field_key)
            else:
                value = localized_value(fields, base_name, lang)
            values[key] = value

        if not values["sourceName"]:
            values["sourceName"] = text_value(fields.get("Source Name"))
        values["updateFrequency"] = text_value(fields.get("UpdateFrequency"))
        values["lastUpdate"] = text_value(fields.get("UpdatedThere"))
        values["nextUpdateTime"] = text_value(fields.get("NextUpdateTime"))

        translations = collect_translations(metadata_fields, METADATA_TEXT_FIELDS, exclude=surfaced)
        return values, translations

    def _build_detail(self,
                      record: Record,
                      lang: Optional[str],
                      include_data: bool,
                      comment_fields: Dict[str, Any],
                      metadata: Dict[str, str],
                      metadata_translations: Dict[str, str],
                      category: Tuple[str, str],
                      public_id: Any) -> DatasetDetail:
        fields = record.fields

        title_key, title = localized_field(fields, "Title", lang)
        description_key, description = localized_field(fields, "Description", lang)
        header_key, header_line = localized_field(fields, "Data", lang)
        if header_key == "Data":
            # the bare field holds the rows, not a header line
            header_key, header_line = None, ""

        comment_key, ai_comment = localized_field(comment_fields, "AIComment", lang)
        if not ai_comment and comment_fields is not fields:
            comment_fields = fields
            comment_key, ai_comment = localized_field(fields, "AIComment", lang)

        meta: Dict[str, Any] = {
            "id": public_id,
            "language": normalize_language(lang),
            "title": title,
            "description": description,
            "updateFrequency": metadata["updateFrequency"],
            "format": header_line,
            "lastUpdate": metadata["lastUpdate"],
            "nextUpdateTime": metadata["nextUpdateTime"],
            "sourceName": metadata["sourceName"],
        }

        category_display, country = category
        if category_display:
            meta["category"] = category_display
        if country:
            meta["country"] = country

        hub_titles = self._optional(
            "content hubs", content_hub_titles, self.cache, record.links("ContentHub"), lang
        )
        if hub_titles:
            meta["contentHubs"] = ", ".join(hub_titles)
        if ai_comment:
            meta["aiComment"] = ai_comment
        for key in ("definitions", "researchName", "researchPurpose", "methodology", "unit"):
            if metadata.get(key):
                meta[key] = metadata[key]

        translations = collect_translations(
            fields, ("Title", "Description", "Data"),
            exclude={k for k in (title_key, description_key, header_key) if k},
        )
        translations.update(collect_translations(
            comment_fields, ("AIComment",), exclude={comment_key} if comment_key else ()
        ))
        translations.update(metadata_translations)

        data = None
        if include_data:
            data = parse_table(header_line, text_value(fields.get("Data")))

        return DatasetDetail(meta=meta, data=data, translations=translations)

    def _dataset_detail(self, record: Record, lang: Optional[str],
                        include_data: bool) -> DatasetDetail:
        metadata, metadata_translations = self._metadata_values(record, lang)
        category = self._optional("category", self._category, record, lang) or ("", "")
        return self._build_detail(
            record, lang, include_data,
            comment_fields=self._comment_fields(record),
            metadata=metadata,
            metadata_translations=metadata_translations,
            category=category,
            public_id=self._public_id(record),
        )

    def _division_detail(self, record: Record, lang: Optional[str], include_data: bool,
                         parent: Optional[Record] = None) -> DatasetDetail:
        if parent is None:
            parent_id = record.link("Parent")
            if parent_id:
                parent = self._optional(
                    f"parent dataset {parent_id}",
                    self.records.get_record, self.tables.datasets, parent_id,
                )

        metadata, metadata_translations = self._metadata_values(record, lang)
        if parent is not None:
            parent_metadata, _ = self._metadata_values(parent, lang)
            for key in _INHERITED_KEYS:
                if not metadata[key]:
                    metadata[key] = parent_metadata[key]

        category = self._optional("category", self._category, parent, lang) or ("", "")
        detail = self._build_detail(
            record, lang, include_data,
            comment_fields=record.fields,
            metadata=metadata,
            metadata_translations=metadata_translations,
            category=category,
            public_id=self._public_id(record, division=True),
        )
        if parent is not None:
            detail.meta["parentId"] = self._public_id(parent)
            detail.meta["parentTitle"] = localized_value(parent.fields, "Title", lang)
        return detail
