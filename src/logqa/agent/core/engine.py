"""
Query Engine

Answers one input line end to end:
- Route the line (router.py)
- Run the structured or semantic retrieval path
- Render the result (formatters.py)

Each turn stands alone: no state is carried from one line to the next
and a failed boundary call fails only the current turn, without retries.
"""

import time
import logging
from typing import Optional

from .answer_generator import AnswerGenerator
from .router import QueryRouter, RouteKind, RoutingDecision
from ..retrieval.semantic_retriever import SemanticRetriever
from ..retrieval.vector_store import VectorStore
from ..tools.formatters import ResultFormatter
from ..tools.schemas import ResultKind, TurnResult
from ...config_loader import config
from ...exceptions import LogQAError
from ...services.database import DatabaseService
from ...services.query_service import QueryService, flatten_rows

logger = logging.getLogger(__name__)

FIELDS_GUIDANCE = "Please specify fields to list (e.g. 'list deviceid and model')."
UNIQUE_FIELD_GUIDANCE = "Please specify a field (e.g. 'list unique ward')."


class LogQueryEngine:
    """
    Dispatches routed questions to the retrieval paths.

    Collaborators are injectable so the decision logic can run against
    fakes instead of MongoDB, Ollama or Gemini.
    """

    def __init__(
        self,
        router: Optional[QueryRouter] = None,
        query_service: Optional[QueryService] = None,
        retriever: Optional[SemanticRetriever] = None,
        generator: Optional[AnswerGenerator] = None,
        formatter: Optional[ResultFormatter] = None,
        answer_on_empty_context: Optional[bool] = None
    ):
        """
        Initialize query engine.

        Args:
            router: Input classifier
            query_service: Structured retrieval path
            retriever: Semantic retrieval path
            generator: Answer generator for semantic questions
            formatter: Result presenter
            answer_on_empty_context: Ask the model even when semantic
                retrieval found nothing. Defaults to config.
        """
        self.router = router or QueryRouter()
        self.query_service = query_service or QueryService()
        self.retriever = retriever or SemanticRetriever()
        self.generator = generator or AnswerGenerator()
        self.formatter = formatter or ResultFormatter()

        if answer_on_empty_context is None:
            answer_on_empty_context = config.get('semantic.answer_on_empty_context', True)
        self.answer_on_empty_context = answer_on_empty_context

        logger.info("LogQueryEngine initialized")

    def run(self, question: str) -> TurnResult:
        """
        Answer one input line.

        Args:
            question: Raw user input

        Returns:
            TurnResult; boundary failures are reported in it, not raised
        """
        start_time = time.time()
        decision = self.router.route(question)

        try:
            if decision.kind == RouteKind.SHOW_ALL_LOGS:
                result = self._show_logs(decision)
            elif decision.kind == RouteKind.LIST_UNIQUE_FIELD:
                result = self._list_unique(decision)
            elif decision.kind == RouteKind.STRUCTURED_LIST:
                result = self._structured_list(decision)
            else:
                result = self._semantic_answer(decision)

        except LogQAError as e:
            logger.error(f"{e.subsystem} failure while answering '{decision.question[:50]}': {e}")
            result = TurnResult(
                success=False,
                kind=ResultKind.ERROR,
                output=self.formatter.format_error(e.subsystem, str(e)),
                error=str(e),
                metadata={"subsystem": e.subsystem}
            )

        result.metadata.update({
            "route": decision.kind.value,
            "execution_time_seconds": time.time() - start_time,
        })
        return result

    # ============================================================
    # STRUCTURED PATH
    # ============================================================

    def _show_logs(self, decision: RoutingDecision) -> TurnResult:
        records = self.query_service.dump_logs(decision.parsed.filters)
        if not records:
            return self._empty()

        return TurnResult(
            success=True,
            kind=ResultKind.DUMP,
            output=self.formatter.format_dump(records),
            metadata={"count": len(records)}
        )

    def _list_unique(self, decision: RoutingDecision) -> TurnResult:
        if not decision.field:
            return self._guidance(UNIQUE_FIELD_GUIDANCE)

        values, truncated = self.query_service.unique_values(decision.field)
        return TurnResult(
            success=True,
            kind=ResultKind.UNIQUE if values else ResultKind.EMPTY,
            output=self.formatter.format_unique(decision.field, values, truncated),
            metadata={"field": decision.field, "count": len(values), "truncated": truncated}
        )

    def _structured_list(self, decision: RoutingDecision) -> TurnResult:
        fields = decision.parsed.fields
        if not fields:
            return self._guidance(FIELDS_GUIDANCE)

        records = self.query_service.find_projected(fields, decision.parsed.filters)
        if not records:
            return self._empty()

        rows = flatten_rows(records, fields)
        return TurnResult(
            success=True,
            kind=ResultKind.TABLE,
            output=self.formatter.format_table(rows, fields),
            metadata={"fields": fields, "count": len(rows)}
        )

    # ============================================================
    # SEMANTIC PATH
    # ============================================================

    def _semantic_answer(self, decision: RoutingDecision) -> TurnResult:
        results = self.retriever.search(decision.question)
        records = [record for record, _ in results]

        if not records and not self.answer_on_empty_context:
            return self._empty()

        answer = self.generator.answer(decision.question, records)
        return TurnResult(
            success=True,
            kind=ResultKind.ANSWER,
            output=self.formatter.format_answer(answer),
            metadata={
                "retrieved": len(records),
                "top_score": results[0][1] if results else None,
                "token_usage": self.generator.get_token_usage(),
            }
        )

    # ============================================================
    # HELPERS
    # ============================================================

    def _empty(self) -> TurnResult:
        return TurnResult(
            success=True,
            kind=ResultKind.EMPTY,
            output=self.formatter.format_empty()
        )

    def _guidance(self, message: str) -> TurnResult:
        return TurnResult(
            success=True,
            kind=ResultKind.GUIDANCE,
            output=self.formatter.format_guidance(message)
        )


def create_engine() -> LogQueryEngine:
    """Build an engine wired to MongoDB and the configured AI providers."""
    db = DatabaseService()
    return LogQueryEngine(
        query_service=QueryService(db),
        retriever=SemanticRetriever(vector_store=VectorStore(db)),
    )
