"""
Pydantic Schemas for Query Turns

Defines the transient structures passed between the parser, the
retrieval paths and the presenter. Nothing here is persisted.
"""

from typing import Any, Dict, List, Optional
from enum import Enum

from pydantic import BaseModel, Field


# ============================================================
# ENUMS
# ============================================================

class ResultKind(str, Enum):
    """What a finished turn produced."""
    TABLE = "table"
    UNIQUE = "unique"
    DUMP = "dump"
    ANSWER = "answer"
    EMPTY = "empty"
    GUIDANCE = "guidance"
    ERROR = "error"


# ============================================================
# PARSED INTENT
# ============================================================

class ParsedQuery(BaseModel):
    """Fields to project and filters to apply for one structured query."""

    fields: List[str] = Field(
        default_factory=list,
        description="Canonical field paths, in the order the user asked for them",
        examples=[["DeviceId", "LogData.Model"]]
    )

    filters: Dict[str, Any] = Field(
        default_factory=dict,
        description="Canonical field path -> MongoDB predicate",
        examples=[{"DeviceId": "ABC123"}, {"LogData.Ward": {"$regex": "icu", "$options": "i"}}]
    )


# ============================================================
# OUTPUT WRAPPER
# ============================================================

class TurnResult(BaseModel):
    """Standardized result of answering one input line."""

    success: bool = Field(
        ...,
        description="False only when a retrieval boundary failed"
    )

    kind: ResultKind = Field(
        ...,
        description="Which presenter branch produced the output"
    )

    output: str = Field(
        default="",
        description="Rendered text for the user"
    )

    error: Optional[str] = Field(
        default=None,
        description="Error message if a boundary call failed"
    )

    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata (route, count, execution time, etc.)"
    )
