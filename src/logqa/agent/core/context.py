"""
Context rendering for the answer prompt.

Only six fields per log go into the prompt to keep the context window
small: device id, summary, state, model, ward and timestamp.
"""

from typing import Any, Mapping, Sequence

from ...models import get_path

CONTEXT_FIELDS = (
    ("DeviceId", "DeviceId"),
    ("Summary", "LogSummary"),
    ("State", "LogData.State"),
    ("Model", "LogData.Model"),
    ("Ward", "LogData.Ward"),
    ("Timestamp", "Timestamp"),
)


def format_log(position: int, record: Mapping[str, Any]) -> str:
    """Render one record; missing values (or missing LogData) print as None."""
    lines = [f"# Log {position}"]
    for label, field_path in CONTEXT_FIELDS:
        lines.append(f"{label}: {get_path(record, field_path)}")
    return "\n".join(lines)


def format_context(records: Sequence[Mapping[str, Any]]) -> str:
    """Render retrieved records as numbered blocks separated by a blank line."""
    return "\n\n".join(
        format_log(position, record)
        for position, record in enumerate(records, start=1)
    )
