"""Builders for ``filterByFormula`` expressions of the records API."""

from typing import Optional, Union


def quote(value: str) -> str:
    """Render a string literal for a formula."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def field_ref(name: str) -> str:
    return "{" + name + "}"


def equals(field: str, value: Union[int, float, str]) -> str:
    """``{field} = value`` with numbers left unquoted."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{field_ref(field)} = {value}"
    return f"{field_ref(field)} = {quote(value)}"


def equals_ignore_case(field: str, value: str) -> str:
    """Case-insensitive string equality on a text field."""
    return f"LOWER({field_ref(field)}) = {quote(value.lower())}"


def link_contains(field: str, record_id: str) -> str:
    """True when a list/lookup field contains ``record_id``."""
    return f"FIND({quote(record_id)}, ARRAYJOIN({field_ref(field)}))"


def _combine(operator: str, clauses) -> Optional[str]:
    parts = [c for c in clauses if c]
    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    return f"{operator}({', '.join(parts)})"


def all_of(*clauses: Optional[str]) -> Optional[str]:
    """Combine clauses with ``AND``; None clauses are skipped."""
    return _combine("AND", clauses)


def any_of(*clauses: Optional[str]) -> Optional[str]:
    """Combine clauses with ``OR``; None clauses are skipped."""
    return _combine("OR", clauses)
