"""
LLM Client for Answer Generation

Provides a single non-streaming interface over:
- Ollama (local, mistral by default)
- Gemini (Google GenAI)
- Token tracking where the provider reports usage
"""

import os
import logging
from typing import Dict, Optional
from enum import Enum

from langchain_core.language_models import BaseLanguageModel
from langchain_core.messages import BaseMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_ollama import OllamaLLM

from ...config_loader import config
from ...exceptions import GenerationError

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    OLLAMA = "ollama"
    GOOGLE = "google"


class LLMClient:
    """
    Unified LLM client for answer generation.

    Features:
    - Ollama or Gemini backends
    - Non-streaming responses returned verbatim
    - Explicit request timeout
    - Token tracking
    - Configuration from settings.yaml
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ):
        """
        Initialize LLM client.

        Args:
            provider: LLM provider ('ollama', 'google'). Defaults to config.
            model: Model name. Defaults to config.
            temperature: Sampling temperature (0-1). Defaults to config.
            max_tokens: Max output tokens. Defaults to config.
        """
        llm_config = config.get_section('llm')

        self.provider = provider or llm_config.get('provider', 'ollama')
        self.model = model or llm_config.get('model', 'mistral')
        self.temperature = temperature if temperature is not None else llm_config.get('temperature', 0.2)
        self.max_tokens = max_tokens or llm_config.get('max_tokens', 1024)
        self.timeout = llm_config.get('timeout_seconds', 120)

        base_url_env = llm_config.get('base_url_env', 'OLLAMA_URL')
        self.base_url = os.getenv(base_url_env) or llm_config.get('base_url', 'http://localhost:11434')

        api_key_env = llm_config.get('api_key_env', 'GEMINI_API_KEY')
        self.api_key = os.getenv(api_key_env)

        if self.provider == LLMProvider.GOOGLE and not self.api_key:
            logger.warning(f"API key not found in environment variable: {api_key_env}")

        self.llm = self._create_llm()

        # Token tracking
        self.total_input_tokens = 0
        self.total_output_tokens = 0

        logger.info(
            f"LLM Client initialized: {self.provider}/{self.model} "
            f"(temp={self.temperature}, max_tokens={self.max_tokens}, timeout={self.timeout}s)"
        )

    def _create_llm(self) -> BaseLanguageModel:
        """
        Create LLM instance based on provider.

        Returns:
            LangChain language model instance
        """
        if self.provider == LLMProvider.OLLAMA:
            return self._create_ollama_llm()
        elif self.provider == LLMProvider.GOOGLE:
            return self._create_google_llm()
        else:
            raise ValueError(f"Unsupported provider: {self.provider}")

    def _create_ollama_llm(self) -> OllamaLLM:
        """Create local Ollama completion model."""
        return OllamaLLM(
            model=self.model,
            base_url=self.base_url,
            temperature=self.temperature,
            num_predict=self.max_tokens,
            client_kwargs={"timeout": self.timeout},
        )

    def _create_google_llm(self) -> ChatGoogleGenerativeAI:
        """Create Google Gemini LLM instance."""
        return ChatGoogleGenerativeAI(
            model=self.model,
            google_api_key=self.api_key,
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
            timeout=self.timeout,
        )

    def generate(self, prompt: str) -> str:
        """
        Send one prompt (non-streaming) and return the full response text.

        Args:
            prompt: Complete prompt text

        Returns:
            Response text, unmodified

        Raises:
            GenerationError: If the provider call failed
        """
        try:
            response = self.llm.invoke(prompt)
        except Exception as e:
            logger.error(f"LLM invocation failed: {e}", exc_info=True)
            raise GenerationError(f"Text generation failed: {e}") from e

        # Completion models return str, chat models return an AIMessage
        if isinstance(response, BaseMessage):
            usage = getattr(response, 'usage_metadata', None) or {}
            self.total_input_tokens += usage.get('input_tokens', 0)
            self.total_output_tokens += usage.get('output_tokens', 0)
            text = response.content
        else:
            text = response

        if not isinstance(text, str):
            raise GenerationError("Text generation returned a non-text response")

        logger.debug(f"LLM response: {text[:100]}...")
        return text

    def get_token_usage(self) -> Dict[str, int]:
        """
        Get cumulative token usage.

        Returns:
            Dict with input_tokens, output_tokens, total_tokens
        """
        return {
            "input_tokens": self.total_input_tokens,
            "output_tokens": self.total_output_tokens,
            "total_tokens": self.total_input_tokens + self.total_output_tokens
        }

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"LLMClient(provider={self.provider}, model={self.model}, "
            f"temp={self.temperature})"
        )
