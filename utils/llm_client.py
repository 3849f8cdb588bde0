from __future__ import annotations

import json
import os
from typing import Any, Optional

import google.generativeai as genai  # type: ignore
from loguru import logger

from utils.error_utils import GenerationFailure
from utils.text_utils import strip_code_fence


def parse_json_response(text: Optional[str]) -> Any:
    """
    Best-effort parse of a JSON completion.

    LLMs like to wrap JSON in a ```json fence; that is stripped first.
    Raises GenerationFailure when nothing parseable remains.
    """
    body = strip_code_fence(text)
    if not body:
        raise GenerationFailure("Empty completion; expected JSON.")
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise GenerationFailure(f"Completion is not valid JSON: {exc}") from exc


class LLMClient:
    """
    Text generation gateway with no backend.

    generate() always raises GenerationFailure, which sends every caller
    down its deterministic fallback path. Tests and offline runs use this.
    """

    enabled = False

    def generate(self, prompt: str) -> str:
        raise GenerationFailure("No text generation backend configured.")

    def generate_json(self, prompt: str) -> Any:
        return parse_json_response(self.generate(prompt))


class GeminiLLMClient(LLMClient):
    """
    Google Gemini backed gateway.

    Behavior:
    - If USE_GEMINI_LLM is not enabled, or no API key is set, it stays
      disabled and behaves exactly like LLMClient.
    - Otherwise generate() sends the prompt to Gemini. Any transport or
      service error, and an empty completion, becomes GenerationFailure.
    - No retries: one attempt per call.
    """

    def __init__(self) -> None:
        super().__init__()

        raw_flag = os.getenv("USE_GEMINI_LLM", "0")
        api_key = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")

        use_gemini = raw_flag in {"1", "true", "True"}
        self.enabled = bool(use_gemini and api_key)

        if not self.enabled:
            if not use_gemini:
                logger.info(
                    "GeminiLLMClient: USE_GEMINI_LLM not enabled; "
                    "all generation falls back to templates."
                )
            else:
                logger.warning(
                    "GeminiLLMClient: GOOGLE_API_KEY not set; "
                    "all generation falls back to templates."
                )
            return

        genai.configure(api_key=api_key)

        self.model_name = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        try:
            self.temperature = float(os.getenv("GEMINI_TEMPERATURE", "0.7"))
        except ValueError:
            self.temperature = 0.7

        logger.info(
            "GeminiLLMClient enabled with model={}, temperature={}",
            self.model_name,
            self.temperature,
        )

    def generate(self, prompt: str) -> str:
        if not self.enabled:
            return super().generate(prompt)

        try:
            model = genai.GenerativeModel(self.model_name)
            resp = model.generate_content(
                prompt,
                generation_config={"temperature": self.temperature},
            )
            text = (resp.text or "").strip()
        except Exception as exc:  # noqa: BLE001 - any SDK/transport error
            logger.error("GeminiLLMClient.generate: LLM error: {}", exc)
            raise GenerationFailure(f"Gemini API call failed: {exc}") from exc

        if not text:
            raise GenerationFailure("Gemini returned an empty completion.")
        return text


def get_llm_client() -> LLMClient:
    """
    Factory: prefer GeminiLLMClient, but always return *some* client.

    A disabled GeminiLLMClient behaves like the base LLMClient.
    """
    try:
        return GeminiLLMClient()
    except Exception as exc:  # noqa: BLE001
        logger.error("get_llm_client: failed to init GeminiLLMClient: {}", exc)
        return LLMClient()
