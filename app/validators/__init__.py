"""
app/validators package marker.
"""

from app.validators.milestone_validator import MilestoneRowValidator, RowValidationResult

__all__ = [
    "MilestoneRowValidator",
    "RowValidationResult",
]
