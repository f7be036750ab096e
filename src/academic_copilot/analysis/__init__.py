from .insights import generate_insights
from .trends import (
    analyze_burnout,
    analyze_planning_accuracy,
    analyze_priority_volatility,
    analyze_risk_trends,
)

__all__ = [
    "analyze_burnout",
    "analyze_planning_accuracy",
    "analyze_priority_volatility",
    "analyze_risk_trends",
    "generate_insights",
]
