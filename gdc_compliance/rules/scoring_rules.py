"""
Scoring Rules — maps one requirement analysis to a 0-100 score.

The formula is base(status) + confidence bonus + critical bonus, clamped to
[min_score, max_score]. Inputs are checked before any arithmetic; an
analysis that cannot be scored gets the fallback score and a warning.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

from gdc_compliance.models.enums import ComplianceStatus, RequirementCategory
from gdc_compliance.rules.rules_config import DEFAULT_SCORING_CONFIG, ScoringConfig

logger = logging.getLogger(__name__)


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _coerce_status(value: Any) -> Optional[ComplianceStatus]:
    if isinstance(value, ComplianceStatus):
        return value
    if isinstance(value, str):
        try:
            return ComplianceStatus(value.strip().lower())
        except ValueError:
            return None
    return None


def _coerce_confidence(value: Any) -> Optional[float]:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def _is_critical(requirement: Any) -> bool:
    category = _field(requirement, "category")
    if isinstance(category, RequirementCategory):
        return category == RequirementCategory.CRITICAL
    return isinstance(category, str) and category.strip().lower() == RequirementCategory.CRITICAL.value


def score(analysis: Any, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> int:
    """
    Return the compliance score for an analysis.

    Accepts a RequirementAnalysis, an unvalidated model_construct() instance
    or a plain dict with the same keys.
    """
    requirement = _field(analysis, "requirement")
    code = _field(requirement, "code") or "<unknown>"

    status = _coerce_status(_field(analysis, "status"))
    if status is None:
        logger.warning(
            f"[SCORE] {code}: unrecognised status {_field(analysis, 'status')!r} "
            f"— using fallback score {config.fallback_score}"
        )
        return config.fallback_score

    confidence = _coerce_confidence(_field(analysis, "confidence"))
    if confidence is None:
        logger.warning(
            f"[SCORE] {code}: invalid confidence {_field(analysis, 'confidence')!r} "
            f"— using fallback score {config.fallback_score}"
        )
        return config.fallback_score

    confidence = min(max(confidence, 0.0), 100.0)

    base = config.base_scores[status]
    confidence_bonus = (
        (confidence - config.confidence_pivot) / config.confidence_span * config.confidence_bonus_max
    )
    category_bonus = config.critical_bonus if _is_critical(requirement) else 0.0

    raw = base + confidence_bonus + category_bonus
    clamped = min(max(raw, config.min_score), config.max_score)
    result = int(round(clamped))

    logger.debug(
        f"[SCORE] {code}: status={status.value} confidence={confidence:.0f} "
        f"base={base:.0f} bonus={confidence_bonus:+.1f}/{category_bonus:+.0f} → {result}"
    )
    return result
