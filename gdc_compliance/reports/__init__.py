from .questionnaire import build_questionnaire
from .report_builder import build_text_report
from .summary import (
    critical_counts,
    domain_summaries,
    executive_summary_tier,
    overall_score,
    priority_actions,
    summarize,
)

__all__ = [
    "build_questionnaire",
    "build_text_report",
    "critical_counts",
    "domain_summaries",
    "executive_summary_tier",
    "overall_score",
    "priority_actions",
    "summarize",
]
