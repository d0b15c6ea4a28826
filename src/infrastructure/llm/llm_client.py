from __future__ import annotations

import json
import logging
import os
import socket
import time
import urllib.error
import urllib.request
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://127.0.0.1:11434"
DEFAULT_MODEL = "llama3.1:8b"


class LLMClient:
    """Ollama `/api/chat` client for advisory text. Returns "" whenever the model is unreachable."""

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        timeout_seconds: float | None = None,
        temperature: float | None = None,
    ) -> None:
        self.base_url = (base_url or os.getenv("OLLAMA_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        self.model = model or os.getenv("OLLAMA_MODEL", DEFAULT_MODEL)
        self.timeout_seconds = timeout_seconds or float(os.getenv("OLLAMA_TIMEOUT_SECONDS", "30"))
        self.temperature = temperature if temperature is not None else float(os.getenv("OLLAMA_TEMPERATURE", "0.3"))

    def _messages(self, prompt: str, system: str | None) -> list[dict[str, str]]:
        messages = [{"role": "system", "content": system}] if system else []
        messages.append({"role": "user", "content": prompt})
        return messages

    def _post(self, path: str, payload: dict[str, Any]) -> Any:
        req = urllib.request.Request(
            url=f"{self.base_url}{path}",
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
            return json.loads(resp.read().decode("utf-8"))

    def complete(self, prompt: str, system: str | None = None) -> str:
        started = time.perf_counter()
        payload = {
            "model": self.model,
            "messages": self._messages(prompt, system),
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        logger.info("LLMClient chat start model=%s prompt_chars=%d timeout=%.1fs", self.model, len(prompt), self.timeout_seconds)
        try:
            body = self._post("/api/chat", payload)
        except (socket.timeout, urllib.error.URLError, TimeoutError, json.JSONDecodeError) as exc:
            logger.warning("LLMClient chat failed after %.2fs: %s", time.perf_counter() - started, exc)
            return ""

        message = body.get("message") if isinstance(body, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            logger.warning("LLMClient chat returned no text model=%s", self.model)
            return ""
        logger.info("LLMClient chat complete in %.2fs response_chars=%d", time.perf_counter() - started, len(content))
        return content.strip()
