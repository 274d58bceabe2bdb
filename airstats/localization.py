"""Language selection for localized record fields.

Every translatable field is stored once per language, e.g. ``TitleFR``,
``TitleDE`` and ``TitleEN``. The oldest records only carry the bare base
name (``Title``) for English. Lookups walk the requested language first,
then English, then the bare base name.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from .utils import text_value

CANONICAL_LANGUAGE = "EN"

SUPPORTED_LANGUAGES = [
    "FR", "CZ", "SK", "IT", "CN", "JP", "SI", "LT", "LV", "FI",
    "UA", "PT", "VN", "DE", "NL", "TR", "EE", "RS", "HR", "ES",
    "PL", "HU", "GR", "RO", "BG", "EN",
]

# Base names of the fields translated on dataset and division records
RECORD_TEXT_FIELDS = ("Title", "Description", "Data", "AIComment")

# Base names of the fields translated on metadata records
METADATA_TEXT_FIELDS = (
    "Definitions", "ResearchName", "ResearchPurpose",
    "Methodology", "SourceName", "Unit",
)


def normalize_language(lang: Optional[str]) -> str:
    """
    Normalize a requested language code.

    Args:
        lang: Two-letter language code in any case, or None

    Returns:
        The uppercase code, or ``EN`` when absent or unsupported
    """
    if not lang:
        return CANONICAL_LANGUAGE
    code = lang.strip().upper()
    if code not in SUPPORTED_LANGUAGES:
        return CANONICAL_LANGUAGE
    return code


def field_candidates(base_name: str, lang: Optional[str]) -> List[str]:
    """Field keys to try for ``base_name`` in ``lang``, in priority order."""
    code = normalize_language(lang)
    candidates = [f"{base_name}{code}"]
    if code != CANONICAL_LANGUAGE:
        candidates.append(f"{base_name}{CANONICAL_LANGUAGE}")
    candidates.append(base_name)
    return candidates


def resolve_field(base_name: str, lang: Optional[str]) -> Tuple[str, str]:
    """
    Compute the concrete field key for a language and its fallback key.

    Args:
        base_name: Field base name such as ``Title``
        lang: Requested language code

    Returns:
        Tuple of (concrete field key, first fallback key)
    """
    candidates = field_candidates(base_name, lang)
    return candidates[0], candidates[1]


def localized_field(fields: Dict[str, Any], base_name: str,
                    lang: Optional[str]) -> Tuple[Optional[str], str]:
    """
    Pick the first non-empty localized value from a record's fields.

    Returns:
        Tuple of (field key that supplied the value, value). The key is None
        and the value empty when no candidate holds any text.
    """
    if not fields:
        return None, ""
    for key in field_candidates(base_name, lang):
        value = text_value(fields.get(key))
        if value.strip():
            return key, value
    return None, ""


def localized_value(fields: Dict[str, Any], base_name: str, lang: Optional[str]) -> str:
    """Localized text of ``base_name``; empty string when nothing is set."""
    return localized_field(fields, base_name, lang)[1]


def collect_translations(fields: Dict[str, Any],
                         base_names: Iterable[str],
                         exclude: Iterable[str] = ()) -> Dict[str, str]:
    """
    Gather every non-empty per-language variant of the given base names.

    Args:
        fields: Record fields
        base_names: Base names to collect, e.g. ``RECORD_TEXT_FIELDS``
        exclude: Field keys already surfaced elsewhere in the response

    Returns:
        Mapping of field key (e.g. ``TitleFR``) to its text
    """
    if not fields:
        return {}
    skip = set(exclude)
    base_names = list(base_names)
    translations = {}
    for lang in SUPPORTED_LANGUAGES:
        for base_name in base_names:
            key = f"{base_name}{lang}"
            if key in skip:
                continue
            value = text_value(fields.get(key))
            if value.strip():
                translations[key] = value
    return translations
