"""
Capability interfaces for the external collaborators.

The engine depends on these narrow shapes rather than on MongoDB,
Ollama or Gemini directly.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol


class LogStore(Protocol):
    """Filtered find and aggregate over the log collection."""

    def find(
        self,
        filters: Mapping[str, Any],
        projection: Optional[Mapping[str, Any]] = None,
        limit: int = 0
    ) -> List[Dict[str, Any]]:
        ...

    def aggregate(self, pipeline: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        ...


class TextEmbedder(Protocol):
    """Turns a question into a fixed-length vector."""

    def embed_query(self, query: str) -> List[float]:
        ...


class TextGenerator(Protocol):
    """Answers a single prompt, non-streaming."""

    def generate(self, prompt: str) -> str:
        ...
