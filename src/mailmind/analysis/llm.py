"""LLM clients: Ollama over HTTP and, optionally, Claude."""

import logging
from typing import Any

import anthropic
import httpx

from ..config.settings import Settings, get_settings
from ..exceptions import LLMUnavailableError

logger = logging.getLogger(__name__)

EMBED_INPUT_LIMIT = 8000
CONNECTION_CHECK_TIMEOUT = 5.0


class OllamaClient:
    """Chat, embeddings and health checks against an Ollama server."""

    def __init__(
        self,
        base_url: str | None = None,
        chat_model: str | None = None,
        embed_model: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Ollama server URL.
            chat_model: Model used for chat completions.
            embed_model: Model used for embeddings.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        settings = get_settings()
        self._base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self._chat_model = chat_model or settings.ollama_chat_model
        self._embed_model = embed_model or settings.ollama_embed_model

        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=timeout or settings.llm_timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def model(self) -> str:
        return self._chat_model

    def close(self) -> None:
        self._client.close()

    def chat(self, messages: list[dict[str, str]], model: str | None = None) -> str:
        """Send a non-streaming chat request.

        Args:
            messages: Chat messages with ``role`` and ``content``.
            model: Optional model override.

        Returns:
            The assistant's reply.

        Raises:
            LLMUnavailableError: If the server cannot be reached or errors.
        """
        payload = {"model": model or self._chat_model, "messages": messages, "stream": False}
        try:
            response = self._client.post("/api/chat", json=payload)
            response.raise_for_status()
            data = response.json()
            return data["message"]["content"]
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Ollama chat error: {e}")
            raise LLMUnavailableError(str(e)) from e

    def check_connection(self) -> bool:
        try:
            response = self._client.get("/api/tags", timeout=CONNECTION_CHECK_TIMEOUT)
        except httpx.HTTPError as e:
            logger.debug(f"Ollama not reachable at {self._base_url}: {e}")
            return False
        return response.is_success

    def list_models(self) -> list[str]:
        try:
            response = self._client.get("/api/tags", timeout=CONNECTION_CHECK_TIMEOUT)
            if not response.is_success:
                return []
            models = response.json().get("models") or []
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Could not list Ollama models: {e}")
            return []
        return [m["name"] for m in models if isinstance(m, dict) and "name" in m]

    def embed(self, text: str) -> list[float] | None:
        """Embed text with the embedding model.

        Input is truncated to 8000 characters. Both the ``embedding`` and the
        ``embeddings`` response shapes are accepted.

        Returns:
            The embedding vector, or None on any failure.
        """
        payload = {"model": self._embed_model, "input": text[:EMBED_INPUT_LIMIT]}
        try:
            response = self._client.post("/api/embed", json=payload)
            if not response.is_success:
                logger.error(f"Embedding API error: {response.status_code}")
                return None
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Embedding generation error: {e}")
            return None

        embedding = data.get("embedding") if isinstance(data, dict) else None
        if not embedding and isinstance(data, dict):
            embeddings = data.get("embeddings") or []
            embedding = embeddings[0] if embeddings else None

        if not isinstance(embedding, list) or not embedding:
            logger.error(f"Invalid embedding response: {str(data)[:200]}")
            return None
        return embedding


class ClaudeClient:
    """Chat through the Anthropic API; embeddings still come from Ollama."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        embedder: OllamaClient | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Anthropic API key.
            model: Claude model to use.
            embedder: Client used for embeddings.
        """
        settings = get_settings()
        self._api_key = api_key or settings.anthropic_api_key
        self._model = model or settings.claude_model
        self._embedder = embedder or OllamaClient()

        self._client = anthropic.Anthropic(api_key=self._api_key)

    @property
    def base_url(self) -> str:
        return self._embedder.base_url

    @property
    def model(self) -> str:
        return self._model

    def close(self) -> None:
        self._embedder.close()

    def chat(self, messages: list[dict[str, str]], model: str | None = None) -> str:
        """Send a chat request to Claude.

        System messages are joined into the ``system`` parameter; the rest
        are passed through in order.
        """
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        turns = [
            {"role": m["role"], "content": m["content"]}
            for m in messages
            if m["role"] in ("user", "assistant")
        ]

        kwargs: dict[str, Any] = {
            "model": model or self._model,
            "max_tokens": 2048,
            "messages": turns,
        }
        if system:
            kwargs["system"] = system

        try:
            response = self._client.messages.create(**kwargs)
        except anthropic.APIError as e:
            logger.error(f"Claude chat error: {e}")
            raise LLMUnavailableError(str(e)) from e

        return "".join(block.text for block in response.content if block.type == "text")

    def check_connection(self) -> bool:
        return bool(self._api_key)

    def list_models(self) -> list[str]:
        return [self._model]

    def embed(self, text: str) -> list[float] | None:
        return self._embedder.embed(text)


LLMClient = OllamaClient | ClaudeClient


def get_llm_client(settings: Settings | None = None) -> LLMClient:
    """Create the chat client selected by ``llm_provider``."""
    settings = settings or get_settings()
    if settings.llm_provider == "anthropic":
        logger.info(f"Using Claude model {settings.claude_model}")
        return ClaudeClient(api_key=settings.anthropic_api_key, model=settings.claude_model)
    logger.info(f"Using Ollama model {settings.ollama_chat_model} at {settings.ollama_base_url}")
    return OllamaClient(
        base_url=settings.ollama_base_url,
        chat_model=settings.ollama_chat_model,
        embed_model=settings.ollama_embed_model,
        timeout=settings.llm_timeout,
    )
