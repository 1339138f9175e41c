"""Composite readiness scoring.

raw = round(w_role*role + w_research*research + w_practice*practice
            + w_mock*mock + w_history*history)

Component scores are 0-100 each and the weights sum to 1.0, so raw stays
in 0-100. Confidence counts how many of role match, research and practice
are present: 40, 60, 80 or 100 with the default base and step.
"""

import logging

from src.core.config import ScoringConfig
from src.core.numeric import clamp, round_half_up
from src.core.schemas import ReadinessSignals, ScoreResult
from src.pipeline.mock_counter import mock_boost

logger = logging.getLogger(__name__)


def practice_score(minutes: float, ceiling_minutes: float = 300.0) -> int:
    """Normalize practice minutes; saturates at 100 once the ceiling is reached."""
    if minutes <= 0:
        return 0
    return min(100, round_half_up(minutes / ceiling_minutes * 100))


def history_factor(offer_rate: float) -> int:
    return clamp(round_half_up(offer_rate * 1000))


def completeness(signals: ReadinessSignals, config: ScoringConfig) -> int:
    present = (
        signals.role_match > config.role_match_signal_threshold,
        signals.research_done,
        signals.practice_minutes > 0,
    )
    return sum(1 for p in present if p)


def confidence_for(signals: ReadinessSignals, config: ScoringConfig) -> int:
    return min(100, config.confidence_base + config.confidence_step * completeness(signals, config))


def recommend_actions(signals: ReadinessSignals, config: ScoringConfig) -> list[str]:
    """Remediation suggestions in role -> research -> practice order."""
    messages = config.actions
    actions: list[str] = []
    if signals.role_match < config.role_match_action_threshold:
        actions.append(messages.role_match)
    if not signals.research_done:
        actions.append(messages.research)
    if signals.practice_minutes < config.min_practice_minutes:
        actions.append(messages.practice)
    if not actions:
        actions.append(messages.well_prepared)
    return actions


def score_readiness(signals: ReadinessSignals, config: ScoringConfig) -> ScoreResult:
    """Combine the four signals and the historical baseline into a ScoreResult."""
    w = config.weights
    role = clamp(signals.role_match)
    research = 100 if signals.research_done else 0
    practice = practice_score(signals.practice_minutes, config.practice_ceiling_minutes)
    mock = mock_boost(signals.mock_count, config.mock_decay)
    history = history_factor(config.historical_offer_rate)

    raw = round_half_up(
        w.role_match * role
        + w.research * research
        + w.practice * practice
        + w.mock * mock
        + w.history * history
    )

    result = ScoreResult(
        raw_probability=clamp(raw),
        confidence=clamp(confidence_for(signals, config)),
        role_match=role,
        practice_minutes=max(0, signals.practice_minutes),
        actions=recommend_actions(signals, config),
    )
    logger.debug(
        "Scored: role=%d research=%d practice=%d mock=%d history=%d -> %d (confidence %d)",
        role, research, practice, mock, history, result.raw_probability, result.confidence,
    )
    return result
