"""
Forecast - illustrative debris growth projections.
"""

from .projection import (
    CategoryForecastPoint,
    ProjectionPoint,
    RiskLevel,
    classify_risk,
    project,
    project_categories,
)

__all__ = [
    "CategoryForecastPoint",
    "ProjectionPoint",
    "RiskLevel",
    "classify_risk",
    "project",
    "project_categories",
]
