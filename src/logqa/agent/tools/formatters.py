"""
Result Formatters for Terminal Output

Converts retrieval results into text for the interactive session:
- Projected finds as a boxed table (pipe-delimited lines as fallback)
- Distinct values as a bulleted list
- Full dumps as one JSON block per record
- Generated answers as-is
"""

import json
import logging
from typing import Any, List, Mapping, Optional, Sequence

from ...config_loader import config

logger = logging.getLogger(__name__)


class ResultFormatter:
    """
    Formats turn results for display.

    Tables degrade to pipe-delimited lines when tables are disabled or a
    row cannot be laid out.
    """

    def __init__(self, use_tables: Optional[bool] = None, max_cell_width: Optional[int] = None):
        """
        Initialize formatter.

        Args:
            use_tables: Render boxed tables. Defaults to config.
            max_cell_width: Maximum characters per table cell
        """
        presentation_config = config.get_section('presentation')
        self.use_tables = use_tables if use_tables is not None else presentation_config.get('tables', True)
        self.max_cell_width = max_cell_width or presentation_config.get('max_cell_width', 60)

    # ============================================================
    # STRUCTURED RESULTS
    # ============================================================

    def format_table(self, rows: Sequence[Sequence[Any]], fields: Sequence[str]) -> str:
        """
        Render rows with one column per requested field.

        Args:
            rows: Flattened rows, cells aligned with fields
            fields: Column headers

        Returns:
            Boxed table, or pipe-delimited lines if tables are unavailable
        """
        if self.use_tables:
            try:
                return self._render_grid(rows, fields)
            except (TypeError, ValueError) as e:
                logger.warning(f"Table rendering failed, using plain lines: {e}")
        return self.format_plain(rows, fields)

    def format_plain(self, rows: Sequence[Sequence[Any]], fields: Sequence[str]) -> str:
        """Pipe-delimited header and rows."""
        lines = [" | ".join(fields)]
        lines.extend(" | ".join(str(cell) for cell in row) for row in rows)
        return "\n".join(lines)

    def _render_grid(self, rows: Sequence[Sequence[Any]], fields: Sequence[str]) -> str:
        header = [self._cell(field) for field in fields]
        body = []
        for row in rows:
            if len(row) != len(fields):
                raise ValueError(f"Row has {len(row)} cells, expected {len(fields)}")
            body.append([self._cell(value) for value in row])

        widths = [len(text) for text in header]
        for row in body:
            widths = [max(width, len(text)) for width, text in zip(widths, row)]

        border = "+" + "+".join("-" * (width + 2) for width in widths) + "+"

        def line(cells: List[str]) -> str:
            return "| " + " | ".join(text.ljust(width) for text, width in zip(cells, widths)) + " |"

        output = [border, line(header), border]
        output.extend(line(row) for row in body)
        output.append(border)
        return "\n".join(output)

    def _cell(self, value: Any) -> str:
        text = " ".join(str(value).split())
        return self._truncate(text, self.max_cell_width)

    def format_unique(self, field: str, values: Sequence[Any], truncated: bool = False) -> str:
        """Bulleted list of distinct values."""
        if not values:
            return f"No unique values found for '{field}'."

        output = [f"Unique values for '{field}':"]
        output.extend(f"- {value}" for value in values)
        if truncated:
            output.append(f"(showing the first {len(values)} values)")
        return "\n".join(output)

    def format_dump(self, records: Sequence[Mapping[str, Any]]) -> str:
        """One header and indented JSON block per record."""
        blocks = []
        for position, record in enumerate(records, start=1):
            body = json.dumps(record, indent=2, default=str, ensure_ascii=False)
            blocks.append(f"Log {position}:\n{body}")
        return "\n\n".join(blocks)

    # ============================================================
    # SEMANTIC, EMPTY & ERROR RESULTS
    # ============================================================

    def format_answer(self, text: str) -> str:
        """Generated answers are shown exactly as the model wrote them."""
        return text

    def format_empty(self) -> str:
        return "No matching logs found."

    def format_guidance(self, message: str) -> str:
        return message

    def format_error(self, subsystem: str, error: str) -> str:
        return f"{subsystem[:1].upper()}{subsystem[1:]} error: {error}"

    def _truncate(self, text: str, max_length: int) -> str:
        """Truncate text to max length."""
        if len(text) <= max_length:
            return text
        return text[:max_length - 3] + "..."
