"""
Weighted status draw used by the template extractor.
"""

from __future__ import annotations

import random
from typing import Sequence, TypeVar

from gdc_compliance.models.enums import ComplianceStatus, RequirementCategory
from gdc_compliance.rules.rules_config import DEFAULT_STATUS_CONFIG, TemplateStatusConfig

T = TypeVar("T")


def weighted_choice(options: Sequence[tuple[T, float]], rng: random.Random) -> T:
    """
    Pick one option with probability proportional to its weight.

    A single uniform draw walks the cumulative weights; the last option
    absorbs any floating point remainder.
    """
    if not options:
        raise ValueError("weighted_choice needs at least one option")

    total = sum(weight for _, weight in options)
    if total <= 0:
        raise ValueError("weighted_choice needs a positive total weight")

    draw = rng.random() * total
    cumulative = 0.0
    for value, weight in options:
        cumulative += weight
        if draw < cumulative:
            return value
    return options[-1][0]


def draw_status(
    category: RequirementCategory,
    rng: random.Random,
    config: TemplateStatusConfig = DEFAULT_STATUS_CONFIG,
) -> ComplianceStatus:
    """Draw a template status for a requirement of the given category."""
    weights = config.weights.get(category) or config.weights[RequirementCategory.STANDARD]
    return weighted_choice(weights.as_pairs(), rng)
