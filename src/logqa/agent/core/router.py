"""
Query Router for Structured Lookup vs Semantic Retrieval

Routes user input to the retrieval path that should answer it:
- Show all logs: full-record dump with optional exact filters
- List unique: distinct values of one field
- Structured list: projected, filtered find
- Semantic fallback: embedding search + LLM answer

Classification is a fixed, ordered rule table; the first matching rule wins.
A leading "list", "show" or "find" always goes to the structured path, so
some natural-language questions that start with "show" are not answered
semantically. That trade-off is accepted for the speed of exact lookups.
"""

import re
import logging
from typing import Callable, Optional, Tuple
from enum import Enum

from pydantic import BaseModel, Field

from .query_parser import extract_fields_and_filters, extract_filters_only
from ..tools.schemas import ParsedQuery
from ...models import resolve_field

logger = logging.getLogger(__name__)


# ============================================================
# PYDANTIC SCHEMAS
# ============================================================

class RouteKind(str, Enum):
    """Retrieval path chosen for an input line."""
    SHOW_ALL_LOGS = "show_all_logs"
    LIST_UNIQUE_FIELD = "list_unique_field"
    STRUCTURED_LIST = "structured_list"
    SEMANTIC_FALLBACK = "semantic_fallback"


class RoutingDecision(BaseModel):
    """Decision about how to answer one input line."""

    kind: RouteKind = Field(
        description="Retrieval path"
    )

    question: str = Field(
        description="Trimmed input line"
    )

    field: Optional[str] = Field(
        default=None,
        description="Canonical field for list-unique queries"
    )

    parsed: ParsedQuery = Field(
        default_factory=ParsedQuery,
        description="Fields and filters for structured queries"
    )

    reasoning: str = Field(
        default="",
        description="Which rule matched"
    )


# ============================================================
# RULE TABLE
# ============================================================

SHOW_LOGS_RE = re.compile(r"^show\s+(all\s+)?logs\b", re.IGNORECASE)
LIST_UNIQUE_RE = re.compile(r"^list\s+unique\s+(.+)$", re.IGNORECASE)
STRUCTURED_VERB_RE = re.compile(r"^(list|show|find)\b", re.IGNORECASE)
FIELD_CHARS_RE = re.compile(r"[^a-zA-Z0-9_.]")

Rule = Tuple[Callable[[str], bool], RouteKind]

ROUTING_RULES: Tuple[Rule, ...] = (
    (lambda q: SHOW_LOGS_RE.match(q) is not None, RouteKind.SHOW_ALL_LOGS),
    (lambda q: LIST_UNIQUE_RE.match(q) is not None, RouteKind.LIST_UNIQUE_FIELD),
    (lambda q: STRUCTURED_VERB_RE.match(q) is not None, RouteKind.STRUCTURED_LIST),
    (lambda q: True, RouteKind.SEMANTIC_FALLBACK),
)


def classify(question: str) -> RouteKind:
    """Return the first route whose predicate accepts the trimmed question."""
    question = question.strip()
    for predicate, kind in ROUTING_RULES:
        if predicate(question):
            return kind
    return RouteKind.SEMANTIC_FALLBACK


def extract_unique_field(question: str) -> str:
    """
    Pull the field name out of "list unique <field>".

    Characters outside [a-zA-Z0-9_.] are removed before alias resolution;
    an empty string means no usable field was given.
    """
    match = LIST_UNIQUE_RE.match(question.strip())
    if not match:
        return ""
    raw_field = FIELD_CHARS_RE.sub("", match.group(1).strip())
    return resolve_field(raw_field) if raw_field else ""


# ============================================================
# QUERY ROUTER
# ============================================================

class QueryRouter:
    """
    Routes input lines to a retrieval path and extracts the structured
    intent each path needs. Stateless: nothing is cached between turns.
    """

    def route(self, question: str) -> RoutingDecision:
        """
        Route one input line.

        Args:
            question: Raw user input

        Returns:
            RoutingDecision with the route and any parsed fields/filters
        """
        question = question.strip()
        kind = classify(question)

        if kind == RouteKind.SHOW_ALL_LOGS:
            decision = RoutingDecision(
                kind=kind,
                question=question,
                parsed=ParsedQuery(filters=extract_filters_only(question)),
                reasoning="matched 'show [all] logs'"
            )
        elif kind == RouteKind.LIST_UNIQUE_FIELD:
            decision = RoutingDecision(
                kind=kind,
                question=question,
                field=extract_unique_field(question),
                reasoning="matched 'list unique <field>'"
            )
        elif kind == RouteKind.STRUCTURED_LIST:
            decision = RoutingDecision(
                kind=kind,
                question=question,
                parsed=extract_fields_and_filters(question),
                reasoning="leading list/show/find verb"
            )
        else:
            decision = RoutingDecision(
                kind=kind,
                question=question,
                reasoning="no structured pattern matched"
            )

        logger.info(f"Routed '{question[:50]}' to {decision.kind.value} ({decision.reasoning})")
        return decision
