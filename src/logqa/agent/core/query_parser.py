"""
Structured Query Parser

Turns "list/show/find ... [where/with/having/for ...]" lines into a
projection field list and MongoDB filter predicates.

Two filter flavours exist:
- Global filters ("show logs for ward=ICU"): non-identifier values are
  matched as the whole string, case-insensitively.
- Structured-list filters ("list model where ward=icu"): non-identifier
  values are matched anywhere in the field, case-insensitively.

Identifier fields (DeviceId, OrganizationId, UserId, TagId) are always
matched exactly.
"""

import re
import logging
from typing import Any, Dict, List, Optional, Tuple

from ..tools.schemas import ParsedQuery
from ...models import resolve_field, is_identifier_field

logger = logging.getLogger(__name__)


STRUCTURED_QUERY_RE = re.compile(
    r"^(?:list|show|find)\s+(.+?)(?:\s+(?:where|with|having|for)\s+(.+))?$",
    re.IGNORECASE
)
FILTER_CLAUSE_RE = re.compile(r"\b(?:for|with|where|having)\s+(.*)", re.IGNORECASE)

# Commas or the standalone word "and" ("brand" and "standard" stay intact)
LIST_SEPARATOR_RE = re.compile(r",|\band\b", re.IGNORECASE)
FIELD_TOKEN_STRIP_RE = re.compile(r"[^a-zA-Z0-9_.]")
QUOTES_RE = re.compile(r"['\"]")


# ============================================================
# FILTER NORMALIZATION
# ============================================================

def build_predicate(field_path: str, value: str, anchored: bool = False) -> Any:
    """
    Build the MongoDB predicate for one filter.

    Args:
        field_path: Canonical field path
        value: Raw value typed by the user
        anchored: Match the whole field value instead of a substring

    Returns:
        The literal value for identifier fields, a case-insensitive
        $regex predicate otherwise
    """
    if is_identifier_field(field_path):
        return value

    if anchored:
        pattern = f"^{re.escape(value)}$"
    else:
        pattern = _as_pattern(value)

    return {"$regex": pattern, "$options": "i"}


def _as_pattern(value: str) -> str:
    """Use the value as a regex when it compiles, as literal text otherwise."""
    try:
        re.compile(value)
        return value
    except re.error:
        logger.debug(f"Filter value is not a valid pattern, escaping: {value!r}")
        return re.escape(value)


def clean_filters(filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Drop filters whose resolved value is empty so they never constrain a query."""
    return {key: value for key, value in (filters or {}).items() if value}


# ============================================================
# CLAUSE PARSING
# ============================================================

def _split_list(text: str) -> List[str]:
    return LIST_SEPARATOR_RE.split(text)


def _strip_quotes(text: str) -> str:
    return QUOTES_RE.sub("", text.strip())


def _parse_condition(token: str) -> Tuple[str, str]:
    """
    Parse one filter sub-clause.

    "ward='ICU 2'" -> ("ward", "ICU 2")
    "ward ICU 2"   -> ("ward", "ICU 2")
    """
    if "=" in token:
        key, _, value = token.partition("=")
        return _strip_quotes(key), _strip_quotes(value)

    parts = token.strip().split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def extract_fields_and_filters(query: str) -> ParsedQuery:
    """
    Parse a structured-list query.

    Examples:
        >>> extract_fields_and_filters("list deviceid and model").fields
        ['DeviceId', 'LogData.Model']
        >>> extract_fields_and_filters("find model for deviceid=ABC123").filters
        {'DeviceId': 'ABC123'}

    Returns:
        ParsedQuery; its field list is empty when the line does not name
        any usable field
    """
    parsed = ParsedQuery()

    match = STRUCTURED_QUERY_RE.match(query.strip())
    if not match:
        return parsed

    raw_fields, raw_filter = match.group(1), match.group(2)

    for token in _split_list(raw_fields):
        cleaned = FIELD_TOKEN_STRIP_RE.sub("", token.strip())
        if cleaned:
            parsed.fields.append(resolve_field(cleaned))

    if raw_filter:
        for token in _split_list(raw_filter):
            key, value = _parse_condition(token)
            if key and value:
                field_path = resolve_field(key)
                parsed.filters[field_path] = build_predicate(field_path, value, anchored=False)

    logger.debug(f"Parsed structured query: fields={parsed.fields} filters={parsed.filters}")
    return parsed


def extract_filters_only(query: str) -> Dict[str, Any]:
    """
    Parse the trailing "for/with/where/having k=v [and k=v]" clause of a
    show-logs query. Sub-clauses without "=" are ignored.
    """
    filters: Dict[str, Any] = {}

    match = FILTER_CLAUSE_RE.search(query)
    if not match:
        return filters

    for condition in _split_list(match.group(1)):
        if "=" not in condition:
            continue
        key, value = _parse_condition(condition)
        if key and value:
            field_path = resolve_field(key)
            filters[field_path] = build_predicate(field_path, value, anchored=True)

    return filters
