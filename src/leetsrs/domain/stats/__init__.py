# Domain Stats Package
from .models import DailyStats, UpcomingReviewStats, empty_grade_breakdown

__all__ = ["DailyStats", "UpcomingReviewStats", "empty_grade_breakdown"]
