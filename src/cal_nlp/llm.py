"""Gemini client for generative event extraction.

Wraps the Google ``google-genai`` SDK to turn one free-text sentence into a
:class:`~cal_nlp.models.event.ParsedEvent`.  Handles prompt construction,
the API call, response parsing and validation.  Every failure is raised as
:class:`~cal_nlp.exceptions.ExtractionFailed`; there is no retry, the
orchestrator falls back to the rule-based path instead.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import UTC, datetime

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from pydantic import ValidationError

from cal_nlp.clock import TimezoneClock
from cal_nlp.config import DEFAULT_MODEL, DEFAULT_TIMEOUT_SECONDS
from cal_nlp.exceptions import ExtractionFailed
from cal_nlp.models.event import LLMEventSchema, ParsedEvent
from cal_nlp.prompts import SYSTEM_INSTRUCTION, build_system_prompt, build_user_prompt

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```", re.IGNORECASE)


class GeminiEventExtractor:
    """Extracts a calendar event from free text via Google Gemini.

    Args:
        api_key: Google Gemini API key.
        model: Model identifier.  Defaults to ``"gemini-2.0-flash"``.
        clock: Clock used for "now" and for all-day boundaries.
        timeout_seconds: Transport timeout applied to every request.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        clock: TimezoneClock | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._client = genai.Client(
            api_key=api_key,
            http_options=genai_types.HttpOptions(timeout=int(timeout_seconds * 1000)),
        )
        self._model = model
        self._clock = clock or TimezoneClock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self, text: str, timezone: str) -> ParsedEvent:
        """Extract a single event from *text*.

        Args:
            text: The raw event description.
            timezone: The user's IANA timezone name.

        Returns:
            The validated :class:`ParsedEvent`.

        Raises:
            ExtractionFailed: On empty input, API/network errors, or a
                response that is not a JSON object matching the schema.
            InvalidTimezone: If *timezone* is not a known IANA zone.
        """
        if not text or not text.strip():
            raise ExtractionFailed("Empty input; nothing to extract")

        current_local = self._clock.now(timezone)
        user_prompt = build_user_prompt(
            text=text,
            timezone=timezone,
            current_local=current_local.strftime("%Y-%m-%d %H:%M:%S"),
        )
        logger.debug("User prompt sent to Gemini:\n%s", user_prompt)

        config = genai_types.GenerateContentConfig(
            system_instruction=build_system_prompt(),
            response_mime_type="application/json",
            response_schema=LLMEventSchema,
            temperature=0.1,
        )

        raw_text = self._call_api(user_prompt, config)
        logger.debug("Raw Gemini response:\n%s", raw_text)

        event = self._parse_response(raw_text, timezone)
        logger.info(
            "Gemini extracted '%s' | start=%s | duration=%d | all_day=%s",
            event.title,
            event.start_time.isoformat(),
            event.duration,
            event.is_all_day,
        )
        return event

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _call_api(
        self,
        user_prompt: str,
        config: genai_types.GenerateContentConfig,
    ) -> str:
        """Call the Gemini API and return the raw response text.

        Raises:
            ExtractionFailed: On API-level or transport failures.
        """
        try:
            response = self._client.models.generate_content(
                model=self._model,
                contents=user_prompt,
                config=config,
            )
        except genai_errors.APIError as exc:
            raise ExtractionFailed(f"Gemini API call failed: {exc}") from exc
        except genai_errors.UnknownApiResponseError as exc:
            raise ExtractionFailed(f"Gemini returned a non-JSON body: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ExtractionFailed(f"Gemini transport error: {exc}") from exc

        return response.text or ""

    def _parse_response(self, raw_text: str, timezone: str) -> ParsedEvent:
        """Parse raw model output into a :class:`ParsedEvent`.

        Markdown code fences around the JSON are tolerated.  ``duration`` is
        recomputed from the returned span, and all-day events are snapped to
        local midnight / 23:59:59 in *timezone*.

        Raises:
            ExtractionFailed: If the text is empty, not a JSON object, does
                not validate, or holds times outside the datetime range.
        """
        cleaned = _FENCE_RE.sub("", raw_text or "").strip()
        if not cleaned:
            raise ExtractionFailed("Empty response from Gemini", raw_response=raw_text or "")

        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ExtractionFailed(f"Invalid JSON: {exc}", raw_response=raw_text) from exc

        if not isinstance(data, dict):
            raise ExtractionFailed(
                f"Expected a JSON object, got {type(data).__name__}",
                raw_response=raw_text,
            )

        try:
            payload = LLMEventSchema.model_validate(data)
            start = _parse_instant(payload.startTime)
            end = _parse_instant(payload.endTime)
            if payload.isAllDay:
                start, end = self._all_day_bounds(start, end, timezone)
            return ParsedEvent(
                title=payload.title,
                description=payload.description,
                start_time=start,
                end_time=end,
                is_all_day=payload.isAllDay,
                location=payload.location,
            )
        except (ValidationError, ValueError, TypeError, OverflowError) as exc:
            raise ExtractionFailed(
                f"Schema validation failed: {exc}", raw_response=raw_text
            ) from exc

    def _all_day_bounds(
        self, start: datetime, end: datetime, timezone: str
    ) -> tuple[datetime, datetime]:
        """Snap an all-day span to whole local days.

        The first day is the local date of *start*; the last day is the
        local date of *end* (never before the first).
        """
        first = self._clock.to_local(start, timezone).date()
        last = max(first, self._clock.to_local(end, timezone).date())
        snapped_start, _ = self._clock.day_bounds(first, timezone)
        _, snapped_end = self._clock.day_bounds(last, timezone)
        if (snapped_start, snapped_end) != (start, end):
            logger.debug(
                "Snapped all-day span %s - %s to %s - %s",
                start.isoformat(),
                end.isoformat(),
                snapped_start.isoformat(),
                snapped_end.isoformat(),
            )
        return snapped_start, snapped_end


def _parse_instant(value: str) -> datetime:
    """Parse an ISO 8601 timestamp; naive values are taken to be UTC."""
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


__all__ = ["GeminiEventExtractor", "SYSTEM_INSTRUCTION"]
