"""
LLM Runner: builds messages, routes the model, parses structured output.

JSON features get exactly one retry with a stricter instruction when the first
reply cannot be parsed or fails validation.
"""
import json
import logging
import re
from typing import Any, Callable, Optional

from crosscareers.core.errors import ApiError, BadGateway
from crosscareers.llm.provider import LLMProvider
from crosscareers.llm.openai_provider import OpenAIProvider
from crosscareers.llm.router import get_route_for_feature

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant for career development and job applications."

STRICT_JSON_INSTRUCTION = (
    "Your previous reply could not be used. Respond again with ONLY valid JSON that "
    "matches the requested structure. No markdown, no code fences, no commentary."
)


class LLMOutputError(BadGateway):
    """The provider answered but the reply was unusable after the retry."""


def parse_json_response(text: str) -> Any:
    """
    Parse JSON from an LLM reply.

    Accepts bare JSON, fenced ```json blocks, or JSON embedded in prose.

    Raises:
        ValueError: if no JSON object or array can be recovered
    """
    if text is None:
        raise ValueError("Empty response")
    cleaned = re.sub(r"```(?:json)?", "", text).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    for pattern in (r"\{.*\}", r"\[.*\]"):
        match = re.search(pattern, cleaned, re.DOTALL)
        if match:
            try:
                return json.loads(match.group())
            except json.JSONDecodeError:
                continue
    raise ValueError("No JSON found in response")


class LLMRunner:
    """Orchestrates LLM calls for every AI-backed feature."""

    def __init__(self, provider: Optional[LLMProvider] = None):
        self.provider = provider
        if not self.provider:
            try:
                self.provider = OpenAIProvider()
            except ValueError:
                logger.warning("OpenAI provider not available - AI features disabled")
                self.provider = None

    @property
    def available(self) -> bool:
        return self.provider is not None

    def _chat(self, feature: str, messages: list[dict]) -> str:
        if not self.provider:
            raise ApiError("AI provider is not configured", status_code=503)
        model, temperature, max_tokens = get_route_for_feature(feature)
        try:
            response = self.provider.chat(
                messages=messages,
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            logger.error(f"LLM call failed: feature={feature}: {e}", exc_info=True)
            raise BadGateway("AI provider request failed")
        logger.info(
            f"LLM call completed: feature={feature}, model={response.model}, "
            f"tokens={response.tokens_in + response.tokens_out}"
        )
        return response.content or ""

    def generate_text(self, feature: str, prompt: str, system: str = DEFAULT_SYSTEM_PROMPT) -> str:
        """Free-form text completion."""
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        return self._chat(feature, messages).strip()

    def generate_json(
        self,
        feature: str,
        prompt: str,
        system: str = DEFAULT_SYSTEM_PROMPT,
        validate: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        """
        Strict JSON completion.

        ``validate`` receives the parsed value and returns the (possibly normalized)
        result, raising ValueError when the shape is wrong.

        Raises:
            LLMOutputError: when both attempts fail to parse or validate
        """
        messages = [
            {"role": "system", "content": f"{system} Always respond with valid JSON only."},
            {"role": "user", "content": prompt},
        ]
        last_error = None
        for attempt in range(2):
            content = self._chat(feature, messages)
            try:
                parsed = parse_json_response(content)
                return validate(parsed) if validate else parsed
            except (ValueError, TypeError, KeyError) as e:
                last_error = e
                logger.warning(f"Unusable JSON from LLM: feature={feature}, attempt={attempt + 1}: {e}")
                messages = messages + [
                    {"role": "assistant", "content": content},
                    {"role": "user", "content": STRICT_JSON_INSTRUCTION},
                ]
        raise LLMOutputError("AI returned an invalid response", details={"reason": str(last_error)})


_runner: Optional[LLMRunner] = None


def get_llm_runner() -> LLMRunner:
    """FastAPI dependency returning the process-wide runner."""
    global _runner
    if _runner is None:
        _runner = LLMRunner()
    return _runner
