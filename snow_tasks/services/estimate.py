"""Clearing-time estimates for a task.

The built-in heuristic always works. When an LLM provider is configured it is
asked first, and anything that goes wrong falls back to the heuristic.
"""

import logging
import math
import re
import time
from typing import Literal

from flask import Flask
from llama_index.core.llms import LLM, ChatMessage
from opentelemetry.trace import StatusCode
from pydantic import BaseModel, ConfigDict, Field

from snow_tasks.telemetry import get_meter, get_tracer


logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)
meter = get_meter(__name__)

estimate_requests = meter.create_counter(
    name="estimate.requests",
    description="Estimates served, by source",
    unit="1",
)
llm_duration = meter.create_histogram(
    name="estimate.llm.duration",
    description="LLM estimate call duration",
    unit="s",
)

MINUTES_PER_M2 = 1 / 8
SALT_MINUTES = 10
MIN_MINUTES = 10

SYSTEM_PROMPT = (
    "You estimate residential snow-clearing jobs. "
    'Respond ONLY with JSON: {"estimatedMinutes": number, '
    '"difficulty": "low" | "medium" | "high", "proTip": short string}.'
)

_MARKDOWN_JSON_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


class Estimate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    estimated_minutes: int = Field(alias="estimatedMinutes", ge=1)
    difficulty: Literal["low", "medium", "high"]
    pro_tip: str = Field(alias="proTip", min_length=1)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


def _difficulty(minutes: int) -> str:
    if minutes < 30:
        return "low"
    if minutes < 90:
        return "medium"
    return "high"


def _pro_tip(wants_salt: bool, has_equipment: bool) -> str:
    if wants_salt and not has_equipment:
        return "Agree on who brings the salt if you don't have any yourself."
    if wants_salt:
        return "Salt sparingly along the edge of the driveway to save time."
    if not has_equipment:
        return "Mention whether equipment can be borrowed if you have none."
    return "Clear the snow in lanes so the surface ends up even."


def heuristic_estimate(area: int, wants_salt: bool, has_equipment: bool) -> Estimate | None:
    """Rule-of-thumb estimate, or None when the area is not positive."""
    if area <= 0:
        return None
    minutes = max(MIN_MINUTES, math.ceil(area * MINUTES_PER_M2) + (SALT_MINUTES if wants_salt else 0))
    return Estimate(
        estimated_minutes=minutes,
        difficulty=_difficulty(minutes),
        pro_tip=_pro_tip(wants_salt, has_equipment),
    )


def _strip_markdown_json(text: str) -> str:
    text = text.strip()
    m = _MARKDOWN_JSON_RE.match(text)
    return m.group(1).strip() if m else text


def create_llm(provider: str, model: str, api_key: str = "", timeout: float = 10.0) -> LLM:
    if provider == "openai":
        from llama_index.llms.openai import OpenAI

        return OpenAI(model=model, temperature=0.2, api_key=api_key, timeout=timeout)

    if provider == "google":
        from llama_index.llms.google_genai import GoogleGenAI

        return GoogleGenAI(model=model, temperature=0.2, api_key=api_key)

    if provider == "anthropic":
        from llama_index.llms.anthropic import Anthropic

        return Anthropic(model=model, temperature=0.2, api_key=api_key, timeout=timeout)

    raise ValueError(f"Unknown LLM provider: {provider!r}. Choose from: openai, google, anthropic")


class Estimator:
    """Best-effort estimate capability.

    Args:
        llm: Optional LLM to ask first. None means heuristic only.
    """

    def __init__(self, llm: LLM | None = None) -> None:
        self.llm = llm

    def estimate(self, area: int, wants_salt: bool, has_equipment: bool = False) -> Estimate | None:
        fallback = heuristic_estimate(area, wants_salt, has_equipment)
        if fallback is None or self.llm is None:
            estimate_requests.add(1, {"source": "heuristic"})
            return fallback

        try:
            result = self._ask_llm(area, wants_salt, has_equipment)
        except Exception as e:
            logger.warning(f"LLM estimate failed, using heuristic: {type(e).__name__}: {e}")
            estimate_requests.add(1, {"source": "heuristic", "error.type": type(e).__name__})
            return fallback

        estimate_requests.add(1, {"source": "llm"})
        return result

    def _ask_llm(self, area: int, wants_salt: bool, has_equipment: bool) -> Estimate:
        model_name = self.llm.metadata.model_name
        with tracer.start_as_current_span(f"gen_ai.chat {model_name}") as span:
            span.set_attribute("gen_ai.operation.name", "chat")
            span.set_attribute("gen_ai.request.model", model_name)
            span.set_attribute("task.area", area)

            prompt = (
                f"Snow-clearing job of {area} m2. "
                f"The owner {'wants' if wants_salt else 'does not want'} salt spread. "
                f"The owner {'has' if has_equipment else 'does not have'} equipment to lend."
            )
            messages = [
                ChatMessage(role="system", content=SYSTEM_PROMPT),
                ChatMessage(role="user", content=prompt),
            ]

            start = time.perf_counter()
            try:
                response = self.llm.chat(messages)
                raw = _strip_markdown_json(str(response.message.content))
                return Estimate.model_validate_json(raw)
            except Exception as e:
                span.record_exception(e)
                span.set_status(StatusCode.ERROR, str(e))
                span.set_attribute("error.type", type(e).__name__)
                raise
            finally:
                llm_duration.record(time.perf_counter() - start, {"gen_ai.request.model": model_name})


def init_estimator(app: Flask) -> Estimator:
    """Build the app's estimator from config and register it on the app.

    A provider that is unknown or not installed leaves the heuristic in place.
    """
    provider = app.config.get("ESTIMATE_PROVIDER", "")
    llm = None
    if provider:
        try:
            llm = create_llm(
                provider=provider,
                model=app.config.get("ESTIMATE_MODEL", ""),
                api_key=app.config.get("ESTIMATE_API_KEY", ""),
                timeout=app.config.get("ESTIMATE_TIMEOUT", 10.0),
            )
        except (ValueError, ImportError) as e:
            logger.warning(f"LLM estimates disabled, using heuristic: {type(e).__name__}: {e}")
        else:
            logger.info(f"Estimates use {provider} model {app.config.get('ESTIMATE_MODEL')}")

    estimator = Estimator(llm=llm)
    app.extensions["estimator"] = estimator
    return estimator
