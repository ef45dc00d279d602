from __future__ import annotations

import json
from typing import Any

from openai import OpenAI

from slotbot.application.exceptions import LLMContractError, LLMUpstreamError
from slotbot.application.ports.llm import IntentClassifierPort
from slotbot.application.utils.message_rules import normalize_text
from slotbot.core.config import settings
from slotbot.domain.entities.intent import Intent, IntentClassification
from slotbot.infrastructure.llm.prompts import build_classify_prompt


class OpenAIIntentClassifier(IntentClassifierPort):
    """
    OpenAI-backed adapter implementing IntentClassifierPort.

    Raises:
        LLMUpstreamError: networking/provider failures
        LLMContractError: invalid JSON or an intent outside the Intent enum
    """

    def __init__(self, client: OpenAI | None = None) -> None:
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)

    def classify_intent(self, text: str) -> IntentClassification:
        content = self._call_text(
            model=settings.OPENAI_MODEL_CLASSIFY,
            prompt=build_classify_prompt(text),
            temperature=settings.OPENAI_TEMPERATURE_CLASSIFY,
        )
        data = _parse_json(content)

        if not isinstance(data, dict):
            raise LLMContractError("Classify: expected a JSON object with an 'intent' key.")

        raw_intent = str(data.get("intent") or "").strip().lower()
        try:
            intent = Intent(raw_intent)
        except ValueError:
            raise LLMContractError(f"Classify: unknown intent {raw_intent!r}.")

        return IntentClassification(intent=intent.value, normalized_text=normalize_text(text))

    def _call_text(self, model: str, prompt: str, temperature: float) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": "Return only valid JSON. Do not include markdown or extra text."},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                max_tokens=50,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise LLMUpstreamError(f"OpenAI API error: {e}") from e

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content:
            raise LLMContractError("LLM returned empty response text.")
        return content


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except Exception:
        snippet = text[:200].replace("\n", " ")
        raise LLMContractError(f"Classify: invalid JSON. Snippet: {snippet!r}")
