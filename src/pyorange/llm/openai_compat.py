from __future__ import annotations

import json
import urllib.request
import urllib.error
from dataclasses import dataclass
from typing import Any

from ..session.models import AssistantTurn, ToolCall, Usage


class ProviderError(RuntimeError):
    pass


def _parse_arguments(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    try:
        args = json.loads(raw)
    except json.JSONDecodeError:
        # best-effort: empty args; validation will reject the call
        return {}
    return args if isinstance(args, dict) else {}


def parse_response(obj: dict[str, Any]) -> AssistantTurn:
    try:
        msg = obj["choices"][0]["message"]
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderError(f"Malformed provider response: {e}") from e

    turn = AssistantTurn(text=msg.get("content") or "")
    for tc in msg.get("tool_calls") or []:
        fn = tc.get("function") or {}
        turn.tool_calls.append(
            ToolCall(id=str(tc.get("id") or ""), name=str(fn.get("name") or ""), arguments=_parse_arguments(fn.get("arguments")))
        )
    usage = obj.get("usage")
    if isinstance(usage, dict):
        turn.usage = Usage(
            input_tokens=int(usage.get("prompt_tokens") or 0),
            output_tokens=int(usage.get("completion_tokens") or 0),
        )
    return turn


@dataclass
class OpenAICompatProvider:
    """
    Minimal OpenAI-compatible Chat Completions client.
    Point base_url at any compatible gateway serving the catalog models.
    """
    model: str
    base_url: str
    api_key: str
    timeout: int = 120

    def chat(self, messages: list[dict[str, Any]], tools: list[dict[str, Any]] | None = None) -> AssistantTurn:
        if not self.api_key:
            raise ProviderError(
                "Missing API key. Set provider.api_key in pyorange.yaml or the PYORANGE_API_KEY environment variable."
            )
        url = self.base_url.rstrip("/") + "/chat/completions"
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": 0.2,
        }
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"

        req = urllib.request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace") if hasattr(e, "read") else ""
            raise ProviderError(f"Provider HTTPError {e.code}: {e.reason}\n{body}") from e
        except urllib.error.URLError as e:
            raise ProviderError(f"Provider URLError: {e}") from e

        try:
            obj = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ProviderError(f"Provider returned invalid JSON: {e}") from e
        return parse_response(obj)
