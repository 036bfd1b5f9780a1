from .rules_config import (
    DEFAULT_SCORING_CONFIG,
    DEFAULT_STATUS_CONFIG,
    ScoringConfig,
    StatusWeights,
    TemplateStatusConfig,
)
from .scoring_rules import score
from .status_weights import draw_status, weighted_choice
from .insight_rules import derive_insights

__all__ = [
    "DEFAULT_SCORING_CONFIG",
    "DEFAULT_STATUS_CONFIG",
    "ScoringConfig",
    "StatusWeights",
    "TemplateStatusConfig",
    "derive_insights",
    "draw_status",
    "score",
    "weighted_choice",
]
