"""Blocking request/response wrapper around the OpenAI chat completions API."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence

from openai import AsyncOpenAI, OpenAIError

from .config import Settings, get_settings
from .prompts import REPLY_CRITERIA, PromptMessage

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)
_PREVIEW_CHARS = 240


class EvaluationServiceError(RuntimeError):
    """Raised when the text-generation service cannot produce a usable reply."""


class MalformedResponse(EvaluationServiceError):
    """Raised when the reply is not a JSON object with the required top-level fields."""


def _preview(text: str) -> str:
    flattened = " ".join(text.split())
    return flattened[:_PREVIEW_CHARS] + ("…" if len(flattened) > _PREVIEW_CHARS else "")


def parse_json_reply(content: Optional[str], required_keys: Iterable[str] = ()) -> Dict[str, Any]:
    if content is None or not content.strip():
        raise MalformedResponse("Evaluation service returned an empty reply.")
    text = content.strip()
    fenced = _FENCE_PATTERN.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Evaluation service returned non-JSON reply: %s", _preview(content))
        raise MalformedResponse(f"Evaluation service returned malformed JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedResponse(f"Expected a JSON object, received {type(data).__name__}.")
    missing = [key for key in required_keys if key not in data]
    if missing:
        raise MalformedResponse(f"Evaluation reply is missing required fields: {', '.join(missing)}")
    return data


class EvaluationClient:
    """Sends role-tagged prompt messages to the model and returns the parsed JSON reply.

    There is no retry loop and no timeout beyond what the SDK transport applies;
    callers await a single round-trip.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[Any] = None) -> None:
        self._settings = settings or get_settings()
        self._client = client

    @property
    def settings(self) -> Settings:
        return self._settings

    def _openai(self) -> Any:
        if self._client is None:
            try:
                self._client = AsyncOpenAI(
                    api_key=self._settings.openai_api_key,
                    base_url=self._settings.openai_base_url,
                )
            except OpenAIError as exc:
                raise EvaluationServiceError(f"Evaluation service is not configured: {exc}") from exc
        return self._client

    async def generate_json(
        self,
        messages: Sequence[PromptMessage],
        *,
        temperature: float,
        max_tokens: int,
        required_keys: Iterable[str] = (),
    ) -> Dict[str, Any]:
        payload: List[Dict[str, str]] = [dict(message) for message in messages]
        try:
            completion = await self._openai().chat.completions.create(
                model=self._settings.model,
                messages=payload,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )
        except OpenAIError as exc:
            logger.warning("Evaluation service request failed: %s", exc)
            raise EvaluationServiceError(f"Evaluation service request failed: {exc}") from exc

        choices = getattr(completion, "choices", None) or []
        if not choices:
            raise MalformedResponse("Evaluation service returned no choices.")
        content = choices[0].message.content
        logger.debug(
            "Evaluation service replied (model=%s, chars=%s)",
            self._settings.model,
            len(content or ""),
        )
        return parse_json_reply(content, required_keys)

    async def evaluate(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        return await self.generate_json(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self._settings.eval_temperature,
            max_tokens=self._settings.eval_max_tokens,
            required_keys=(REPLY_CRITERIA,),
        )


__all__ = [
    "EvaluationClient",
    "EvaluationServiceError",
    "MalformedResponse",
    "parse_json_reply",
]
