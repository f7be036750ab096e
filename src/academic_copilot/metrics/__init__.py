"""Risk and confidence scoring."""

from .confidence import calculate_confidence, confidence_disclaimer, confidence_level
from .risk import calculate_risk_score, plan_deviation_percent, rank_by_risk, risk_level

__all__ = [
    "calculate_confidence",
    "calculate_risk_score",
    "confidence_disclaimer",
    "confidence_level",
    "plan_deviation_percent",
    "rank_by_risk",
    "risk_level",
]
