"""
OpenAI response mappers.

Both mappers accept SDK objects or plain dicts (for example a JSON body from
a raw HTTP call), so the `openai` package is never imported here.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from continuum.domain.errors import ProviderError
from continuum.domain.models import ProviderResponse, TokenUsage
from continuum.domain.types import InitialRequest

ResponsesCreate = Callable[..., Any]

DEFAULT_CONTINUATION_PROMPT = (
    "Continue exactly where you left off. Do not repeat any content and do not "
    "add commentary."
)


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _usage(raw: Any, *, input_key: str, output_key: str) -> TokenUsage:
    if raw is None:
        return TokenUsage()
    return TokenUsage(
        input_tokens=int(_get(raw, input_key, 0) or 0),
        output_tokens=int(_get(raw, output_key, 0) or 0),
    )


def from_chat_completion(completion: Any, /) -> ProviderResponse:
    """Map a Chat Completions response (`choices[0]`) to a `ProviderResponse`."""
    choices = _get(completion, "choices") or []
    if not choices:
        raise ProviderError("Chat completion has no choices")
    choice = choices[0]
    message = _get(choice, "message")
    content = _get(message, "content") or ""
    return ProviderResponse(
        content=content if isinstance(content, str) else str(content),
        finish_reason=_get(choice, "finish_reason"),
        usage=_usage(
            _get(completion, "usage"), input_key="prompt_tokens", output_key="completion_tokens"
        ),
        continuation_handle=_get(completion, "id"),
        model=_get(completion, "model"),
    )


def _responses_output_text(response: Any) -> str:
    text = _get(response, "output_text")
    if isinstance(text, str):
        return text
    parts: list[str] = []
    for item in _get(response, "output") or []:
        if _get(item, "type") not in (None, "message"):
            continue
        for block in _get(item, "content") or []:
            if _get(block, "type") in ("output_text", "text"):
                parts.append(_get(block, "text") or "")
    return "".join(parts)


def responses_finish_reason(response: Any, /) -> str | None:
    """
    Derive a Chat-Completions-style finish reason from a Responses API status.

    An explicit `finish_reason` on the payload wins; otherwise `status` and
    `incomplete_details.reason` decide.
    """
    explicit = _get(response, "finish_reason")
    if explicit:
        return explicit
    status = _get(response, "status")
    match status:
        case "completed":
            return "stop"
        case "failed" | "cancelled":
            return "error"
        case "incomplete":
            reason = _get(_get(response, "incomplete_details"), "reason")
            match reason:
                case "max_output_tokens":
                    return "length"
                case "content_filter":
                    return "content_filter"
                case _:
                    return "incomplete"
        case _:
            return None


def from_responses_api(response: Any, /) -> ProviderResponse:
    """Map a Responses API response; its `id` becomes the continuation handle."""
    return ProviderResponse(
        content=_responses_output_text(response),
        finish_reason=responses_finish_reason(response),
        usage=_usage(_get(response, "usage"), input_key="input_tokens", output_key="output_tokens"),
        continuation_handle=_get(response, "id"),
        model=_get(response, "model"),
    )


def responses_request_callback(
    create: ResponsesCreate,
    base_params: Mapping[str, Any] | None = None,
    *,
    continuation_prompt: str = DEFAULT_CONTINUATION_PROMPT,
) -> Callable[[InitialRequest, str | None], ProviderResponse]:
    """
    Build a request callback over a Responses-style `create(**kwargs)`.

    The first call sends `base_params` plus `input=request`. Continuations send
    `previous_response_id=<handle>` and `input=continuation_prompt`, so the
    provider keeps the earlier turns server-side.
    """
    params = dict(base_params or {})

    def _callback(request: InitialRequest, continuation_handle: str | None, /) -> ProviderResponse:
        kwargs = dict(params)
        if continuation_handle is None:
            kwargs["input"] = request
        else:
            kwargs["previous_response_id"] = continuation_handle
            kwargs["input"] = continuation_prompt
        return from_responses_api(create(**kwargs))

    return _callback
