"""Lookups over the cached reference tables."""

from typing import Dict, Iterable, List, Optional

from .cache import LookupCache
from .localization import CANONICAL_LANGUAGE, localized_value
from .utils import first_text, normalize_text

_COUNTRY_ALIASES = {
    "eu": "European Union",
    "poland": "Poland",
}


def country_display_name(param: Optional[str]) -> str:
    """
    Canonical country name for a free-text path segment.

    ``eu`` maps to ``European Union`` and ``poland`` to ``Poland`` in any
    case; anything else gets its first letter capitalized.
    """
    if not param:
        return ""
    raw = param.strip()
    alias = _COUNTRY_ALIASES.get(raw.lower())
    if alias:
        return alias
    return raw[:1].upper() + raw[1:]


def category_country(cache: LookupCache, category_id: Optional[str]) -> str:
    """Canonical country of a category record ("" when unknown)."""
    if not category_id:
        return ""
    fields = cache.get_categories().get(category_id)
    if not fields:
        return ""
    return first_text(fields.get("Country")).strip()


def category_name(cache: LookupCache, category_id: Optional[str], lang: Optional[str]) -> str:
    """Localized display name of a category record ("" when unknown)."""
    if not category_id:
        return ""
    fields = cache.get_categories().get(category_id)
    if not fields:
        return ""
    return localized_value(fields, "Secondary", lang)


def category_id(cache: LookupCache, name: str, country: str) -> Optional[str]:
    """
    Find the category record for a (category name, country) pair.

    Both comparisons ignore case and surrounding/duplicate whitespace. The
    first matching record wins.
    """
    wanted_name = normalize_text(name)
    wanted_country = normalize_text(country)
    for record_id, fields in cache.get_categories().items():
        if normalize_text(first_text(fields.get("Country"))) != wanted_country:
            continue
        if normalize_text(localized_value(fields, "Secondary", CANONICAL_LANGUAGE)) == wanted_name:
            return record_id
    return None


def category_ids_by_name(cache: LookupCache, name: str) -> List[str]:
    """All category record ids carrying ``name``, across every country."""
    return list(cache.get_category_index().get(normalize_text(name), []))


def content_hub_id(cache: LookupCache, title: str) -> Optional[str]:
    """
    Find a content hub by its English title or its primary display title.

    Returns:
        The first matching record id, or None
    """
    wanted = normalize_text(title)
    if not wanted:
        return None
    hub_id = cache.get_content_hub_index().get(wanted)
    if hub_id:
        return hub_id
    for record_id, fields in cache.get_content_hubs().items():
        if normalize_text(fields.get("Title")) == wanted:
            return record_id
    return None


def content_hub_titles(cache: LookupCache, hub_ids: Iterable[str], lang: Optional[str]) -> List[str]:
    """Localized titles of the given content hubs, skipping unknown ids."""
    hubs = cache.get_content_hubs()
    titles = []
    for hub_id in hub_ids:
        fields = hubs.get(hub_id)
        if not fields:
            continue
        title = localized_value(fields, "Title", lang)
        if title:
            titles.append(title)
    return titles


def linked_divisions(cache: LookupCache, dataset_record_id: str) -> Dict[str, Dict]:
    """Division records whose ``Parent`` link contains ``dataset_record_id``."""
    matches = {}
    for record_id, fields in cache.get_divisions().items():
        parents = fields.get("Parent") or []
        if not isinstance(parents, list):
            parents = [parents]
        if dataset_record_id in parents:
            matches[record_id] = fields
    return matches


def countries(cache: LookupCache) -> List[str]:
    """Sorted distinct country names found on category records."""
    names = {
        first_text(fields.get("Country")).strip()
        for fields in cache.get_categories().values()
    }
    return sorted(name for name in names if name)


def categories_for_country(cache: LookupCache, country: str, lang: Optional[str]) -> List[str]:
    """Localized category names of one country, de-duplicated in table order."""
    wanted = normalize_text(country)
    names: List[str] = []
    for fields in cache.get_categories().values():
        if normalize_text(first_text(fields.get("Country"))) != wanted:
            continue
        name = localized_value(fields, "Secondary", lang)
        if name and name not in names:
            names.append(name)
    return names


def content_hubs_for_country(cache: LookupCache, country: str, lang: Optional[str]) -> List[str]:
    """Localized titles of the content hubs assigned to one country."""
    wanted = normalize_text(country)
    titles: List[str] = []
    for fields in cache.get_content_hubs().values():
        hub_countries = fields.get("Country") or []
        if not isinstance(hub_countries, list):
            hub_countries = [hub_countries]
        if wanted not in {normalize_text(c) for c in hub_countries}:
            continue
        title = localized_value(fields, "Title", lang)
        if title and title not in titles:
            titles.append(title)
    return titles
