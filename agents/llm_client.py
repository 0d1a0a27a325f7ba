# agents/llm_client.py
import logging
from typing import Any, Dict, List, Optional

import httpx

from config import AnalyzerConfig, ProviderTag, resolve_api_key

logger = logging.getLogger(__name__)

OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
LOCAL_API_URL = "http://localhost:11434/api/chat"


class BackendError(Exception):
    """Transport, auth or quota failure reported by an AI backend."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider} API request failed: {message}")


class UnsupportedProviderError(ValueError):
    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Unsupported AI provider: {provider}")


def _error_message(resp: httpx.Response) -> str:
    """
    Pull a readable message out of an error response:
    {"error": {"message": ...}} (OpenAI/Anthropic), {"error": "..."} (Ollama),
    otherwise the raw body.
    """
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if error:
            return str(error)
    return resp.text or f"HTTP {resp.status_code}"


def _post_json(provider: str, url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float) -> Dict[str, Any]:
    try:
        with httpx.Client(timeout=timeout) as client:
            resp = client.post(url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        raise BackendError(provider, str(e) or e.__class__.__name__) from e

    if resp.is_error:
        raise BackendError(provider, _error_message(resp), status_code=resp.status_code)

    try:
        return resp.json()
    except ValueError as e:
        raise BackendError(provider, "response body is not JSON", status_code=resp.status_code) from e


def _reply_text(provider: str, text) -> str:
    if not isinstance(text, str) or not text.strip():
        raise BackendError(provider, "empty or non-text response")
    return text


def _chat_messages(instruction: str, content: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": instruction},
        {"role": "user", "content": content},
    ]


class OpenAIBackend:
    provider = "OpenAI"
    default_model = "gpt-4"

    def __init__(self, config: AnalyzerConfig):
        self.config = config
        self.api_key = resolve_api_key(config)

    def respond(self, instruction: str, content: str) -> str:
        payload = {
            "model": self.config.model or self.default_model,
            "messages": _chat_messages(instruction, content),
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        data = _post_json(self.provider, OPENAI_API_URL, payload, headers, self.config.request_timeout)
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise BackendError(self.provider, f"unexpected response shape: {e!r}") from e
        usage = data.get("usage") or {}
        logger.debug("OpenAI usage: prompt=%s completion=%s total=%s",
                     usage.get("prompt_tokens"), usage.get("completion_tokens"), usage.get("total_tokens"))
        return _reply_text(self.provider, text)


class AnthropicBackend:
    provider = "Anthropic"
    default_model = "claude-3-sonnet-20240229"

    def __init__(self, config: AnalyzerConfig):
        self.config = config
        self.api_key = resolve_api_key(config)

    def respond(self, instruction: str, content: str) -> str:
        payload = {
            "model": self.config.model or self.default_model,
            "max_tokens": self.config.max_tokens,
            "messages": [{"role": "user", "content": f"{instruction}\n\n{content}"}],
        }
        headers = {
            "x-api-key": self.api_key,
            "Content-Type": "application/json",
            "anthropic-version": ANTHROPIC_VERSION,
        }
        data = _post_json(self.provider, ANTHROPIC_API_URL, payload, headers, self.config.request_timeout)
        try:
            text = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise BackendError(self.provider, f"unexpected response shape: {e!r}") from e
        usage = data.get("usage") or {}
        logger.debug("Anthropic usage: input=%s output=%s",
                     usage.get("input_tokens"), usage.get("output_tokens"))
        return _reply_text(self.provider, text)


class LocalBackend:
    """Ollama-compatible /api/chat endpoint; no auth."""

    provider = "Local"
    default_model = "llama2"

    def __init__(self, config: AnalyzerConfig):
        self.config = config
        self.api_url = config.api_url or LOCAL_API_URL

    def respond(self, instruction: str, content: str) -> str:
        payload = {
            "model": self.config.model or self.default_model,
            "messages": _chat_messages(instruction, content),
            "stream": False,
        }
        headers = {"Content-Type": "application/json"}
        data = _post_json(self.provider, self.api_url, payload, headers, self.config.request_timeout)
        try:
            text = data["message"]["content"]
        except (KeyError, TypeError) as e:
            raise BackendError(self.provider, f"unexpected response shape: {e!r}") from e
        return _reply_text(self.provider, text)


BACKENDS = {
    ProviderTag.OPENAI: OpenAIBackend,
    ProviderTag.ANTHROPIC: AnthropicBackend,
    ProviderTag.LOCAL: LocalBackend,
}


def create_backend(provider: str, config: AnalyzerConfig):
    """Return the backend for a provider tag; raises UnsupportedProviderError otherwise."""
    try:
        tag = ProviderTag(str(provider).lower())
    except ValueError:
        raise UnsupportedProviderError(provider) from None
    return BACKENDS[tag](config)
