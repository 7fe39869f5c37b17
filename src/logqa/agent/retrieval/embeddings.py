"""
Embedding Service

Generates vector embeddings for questions and log texts.

Providers:
- ollama: local Ollama server (/api/embeddings), nomic-embed-text by default
- google: Google GenAI text-embedding models

Every failure (transport, HTTP status, malformed body, missing vector,
wrong dimension) surfaces as EmbeddingError.
"""

import os
import logging
from typing import List, Optional

import requests
from google import genai

from ...config_loader import config
from ...exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class EmbeddingService:
    """
    Text embedding service.

    Features:
    - Ollama or Google GenAI backends
    - Dimension validation
    - Explicit request timeout
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        dimension: Optional[int] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize embedding service.

        Args:
            provider: 'ollama' or 'google'. Defaults to config.
            model: Embedding model name. Defaults to config.
            dimension: Expected vector length. Defaults to config.
            session: requests session for the Ollama provider
        """
        embed_config = config.get_section('embeddings')

        self.provider = provider or embed_config.get('provider', 'ollama')
        self.model_name = model or embed_config.get('model', 'nomic-embed-text')
        self.dimension = dimension or embed_config.get('dimension', 768)
        self.timeout = embed_config.get('timeout_seconds', 30)

        base_url_env = embed_config.get('base_url_env', 'OLLAMA_URL')
        self.base_url = (os.getenv(base_url_env) or embed_config.get('base_url', 'http://localhost:11434')).rstrip('/')

        self.session = session
        self.client = None

        if self.provider == 'google':
            api_key_env = embed_config.get('api_key_env', 'GEMINI_API_KEY')
            api_key = os.getenv(api_key_env)
            if not api_key:
                raise ValueError(
                    f"API key not found in environment variable '{api_key_env}'. "
                    f"Set it with: export {api_key_env}='your-api-key'"
                )
            self.client = genai.Client(api_key=api_key)
        elif self.provider == 'ollama':
            self.session = session or requests.Session()
        else:
            raise ValueError(f"Unsupported embedding provider: {self.provider}")

        logger.info(f"EmbeddingService initialized: {self.provider}/{self.model_name} ({self.dimension}d)")

    def embed_text(self, text: str, task_type: str = "RETRIEVAL_DOCUMENT") -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: Text to embed
            task_type: Google task type (RETRIEVAL_DOCUMENT or RETRIEVAL_QUERY);
                Ollama ignores it

        Returns:
            Embedding vector of the configured dimension

        Raises:
            EmbeddingError: If no valid vector was produced
        """
        if self.provider == 'google':
            embedding = self._embed_google(text, task_type)
        else:
            embedding = self._embed_ollama(text)

        if not isinstance(embedding, list) or not embedding:
            raise EmbeddingError("Embedding service returned no vector")

        # bool is an int subclass but never a vector component
        if not all(isinstance(value, (int, float)) and not isinstance(value, bool) for value in embedding):
            raise EmbeddingError("Embedding service returned a malformed response")

        if len(embedding) != self.dimension:
            raise EmbeddingError(
                f"Embedding dimension mismatch: expected {self.dimension}, "
                f"got {len(embedding)}"
            )

        return embedding

    def _embed_ollama(self, text: str) -> Optional[List[float]]:
        try:
            response = self.session.post(
                f"{self.base_url}/api/embeddings",
                json={"model": self.model_name, "prompt": text},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            logger.error(f"Failed to generate embedding: {e}")
            raise EmbeddingError(f"Embedding request failed: {e}") from e
        except ValueError as e:
            logger.error(f"Embedding response is not JSON: {e}")
            raise EmbeddingError("Embedding service returned a malformed response") from e

        if not isinstance(body, dict):
            raise EmbeddingError("Embedding service returned a malformed response")
        return body.get("embedding")

    def _embed_google(self, text: str, task_type: str) -> Optional[List[float]]:
        try:
            result = self.client.models.embed_content(
                model=self.model_name,
                contents=text,
                config={'task_type': task_type}
            )
        except Exception as e:
            logger.error(f"Failed to generate embedding: {e}")
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        if not result.embeddings:
            return None
        return list(result.embeddings[0].values or [])

    def embed_document(self, text: str) -> List[float]:
        """Embed the text of a stored log record."""
        return self.embed_text(text, task_type="RETRIEVAL_DOCUMENT")

    def embed_query(self, query: str) -> List[float]:
        """Embed a user question."""
        return self.embed_text(query, task_type="RETRIEVAL_QUERY")

    def health_check(self) -> bool:
        """
        Verify embedding service is working.

        Returns:
            True if service is healthy, False otherwise
        """
        try:
            self.embed_text("test")
            logger.info("Embedding health check passed")
            return True
        except EmbeddingError as e:
            logger.error(f"Embedding health check failed: {e}")
            return False
