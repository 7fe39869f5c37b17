"""
Answer Generator

Builds the retrieval-augmented prompt and returns the model's answer
verbatim. No post-processing, citation extraction or answer checking
happens here.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from .context import format_context
from .llm_client import LLMClient
from ...services.protocols import TextGenerator

logger = logging.getLogger(__name__)

PROMPT_PREAMBLE = (
    "You are an assistant helping debug medical device logs. "
    "Use the context to answer the user's question."
)


def build_prompt(context: str, question: str) -> str:
    """Preamble, context block and the original question, in that order."""
    return f"{PROMPT_PREAMBLE}\n\nContext:\n{context}\n\nQuestion: {question}\n\nAnswer:"


class AnswerGenerator:
    """Answers a question from retrieved log records."""

    def __init__(self, llm_client: Optional[TextGenerator] = None):
        self.llm_client = llm_client or LLMClient()

    def answer(self, question: str, records: Sequence[Mapping[str, Any]]) -> str:
        """
        Generate an answer grounded in the given records.

        Args:
            question: Original user question
            records: Retrieved log records (may be empty)

        Returns:
            The model's response text

        Raises:
            GenerationError: If the generation service failed
        """
        context = format_context(records)
        prompt = build_prompt(context, question)

        logger.info(f"Generating answer from {len(records)} context records")
        return self.llm_client.generate(prompt)

    def get_token_usage(self) -> Dict[str, int]:
        """Cumulative token usage of the LLM client; empty if it does not track any."""
        get_usage = getattr(self.llm_client, 'get_token_usage', None)
        return get_usage() if get_usage else {}
