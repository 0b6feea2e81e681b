"""Hybrid orchestrator: generative extraction with a rule-based fallback.

The orchestrator is the only entry point the rest of an application needs.
Each call runs an explicit two-state sequence:

1. ``TRY_GENERATIVE`` -- ask the generative extractor.  Success ends the
   run; an :class:`~cal_nlp.exceptions.ExtractionFailed` is logged and the
   run moves on.  Skipped when no generative extractor is configured.
2. ``FALLBACK_RULE`` -- ask the rule-based extractor.  An event ends the
   run successfully; ``None`` (empty input) ends it as a failure.

Nothing is merged between the two paths and nothing is retained between
calls.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Protocol

from cal_nlp.clock import TimezoneClock
from cal_nlp.config import Settings
from cal_nlp.exceptions import BothFailed, ExtractionFailed
from cal_nlp.llm import GeminiEventExtractor
from cal_nlp.models.event import ParsedEvent
from cal_nlp.rules.extractor import RuleBasedExtractor

logger = logging.getLogger(__name__)


class GenerativeExtractor(Protocol):
    """Anything that turns text into an event or raises ``ExtractionFailed``."""

    def parse(self, text: str, timezone: str) -> ParsedEvent: ...


class ParseState(enum.Enum):
    """States of a single orchestrated parse."""

    TRY_GENERATIVE = "try_generative"
    FALLBACK_RULE = "fallback_rule"


@dataclass
class ParseOutcome:
    """Terminal result of :meth:`HybridOrchestrator.run`.

    Attributes:
        event: The parsed event, or ``None`` when both paths failed.
        source: The state that produced *event* (``None`` on failure).
        visited: States entered during the run, in order.
        errors: Messages of the failures recovered from along the way.
    """

    event: ParsedEvent | None = None
    source: ParseState | None = None
    visited: list[ParseState] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.event is not None


class HybridOrchestrator:
    """Runs the generative extractor first and falls back to the rules.

    Args:
        rule_extractor: The deterministic fallback.  Built from *clock* if
            omitted.
        generative: The generative extractor, or ``None`` for rule-only
            operation.
        clock: Clock used to validate the timezone up front.
    """

    def __init__(
        self,
        rule_extractor: RuleBasedExtractor | None = None,
        generative: GenerativeExtractor | None = None,
        clock: TimezoneClock | None = None,
    ) -> None:
        self._clock = clock or TimezoneClock()
        self._rules = rule_extractor or RuleBasedExtractor(self._clock)
        self._generative = generative

    @property
    def generative_enabled(self) -> bool:
        return self._generative is not None

    def run(self, text: str, timezone: str) -> ParseOutcome:
        """Run the two-state sequence and return its terminal outcome.

        Args:
            text: Free-text event description.
            timezone: The caller's IANA timezone name.

        Returns:
            A :class:`ParseOutcome`; extraction failures are recorded on it
            rather than raised.

        Raises:
            InvalidTimezone: If *timezone* is not a known IANA zone.
        """
        # Both paths need a valid zone, so there is nothing to fall back to.
        self._clock.now(timezone)

        outcome = ParseOutcome()
        generative = self._generative
        state: ParseState | None = (
            ParseState.TRY_GENERATIVE if generative is not None else ParseState.FALLBACK_RULE
        )

        while state is not None:
            outcome.visited.append(state)

            if state is ParseState.TRY_GENERATIVE and generative is not None:
                try:
                    outcome.event = generative.parse(text, timezone)
                except ExtractionFailed as exc:
                    logger.warning(
                        "Generative extraction failed, falling back to rules: %s", exc
                    )
                    outcome.errors.append(str(exc))
                    state = ParseState.FALLBACK_RULE
                    continue
            else:
                outcome.event = self._rules.parse(text, timezone)
                if outcome.event is None:
                    outcome.errors.append("Rule-based extractor found no event")
                    logger.warning("Both extraction paths failed for %r", text)
                    break

            outcome.source = state
            logger.info("Event parsed via %s", state.value)
            state = None

        return outcome

    def parse_event(self, text: str, timezone: str) -> ParsedEvent:
        """Parse *text* into a single event.

        Raises:
            InvalidTimezone: If *timezone* is not a known IANA zone.
            BothFailed: If neither path produced an event.
        """
        outcome = self.run(text, timezone)
        if outcome.event is None:
            raise BothFailed(text)
        return outcome.event


def build_orchestrator(
    settings: Settings,
    clock: TimezoneClock | None = None,
) -> HybridOrchestrator:
    """Wire a :class:`HybridOrchestrator` from *settings*.

    Without an API key the orchestrator runs rule-only.
    """
    clock = clock or TimezoneClock()
    generative: GenerativeExtractor | None = None
    if settings.generative_enabled:
        generative = GeminiEventExtractor(
            api_key=settings.gemini_api_key or "",
            model=settings.gemini_model,
            clock=clock,
            timeout_seconds=settings.timeout_seconds,
        )
    else:
        logger.info("GEMINI_API_KEY not set; running rule-based extraction only")
    return HybridOrchestrator(
        rule_extractor=RuleBasedExtractor(clock),
        generative=generative,
        clock=clock,
    )
