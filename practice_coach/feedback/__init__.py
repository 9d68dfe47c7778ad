"""Feedback core: metrics extraction, live tracking, turn analysis and score blending.

Modules:
- metrics: structural text metrics (live and submit-time variants)
- heuristics: stateless point-based confidence estimate
- scenarios: scenario catalogue and scenario-specific overlay rules
- rules: live tracker rule tables (panel and engine instances)
- tracker: stateful live feedback tracker with subscriber notifications
- analyzer: per-turn analysis of a submitted utterance
- blend: blended score and post-turn summary helpers
"""

from .analyzer import TurnAnalysis, analyze
from .blend import blend
from .metrics import ExtendedMetrics, Metrics, extract, extract_extended
from .rules import ENGINE_RULES, PANEL_RULES, RuleTable
from .tracker import LiveFeedbackState, LiveFeedbackTracker

__all__ = [
    "ENGINE_RULES",
    "ExtendedMetrics",
    "LiveFeedbackState",
    "LiveFeedbackTracker",
    "Metrics",
    "PANEL_RULES",
    "RuleTable",
    "TurnAnalysis",
    "analyze",
    "blend",
    "extract",
    "extract_extended",
]
