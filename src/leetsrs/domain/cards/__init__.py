# Domain Cards Package
from .models import Card, CardState, Difficulty, Grade, MemoryState, Note, RateResult

__all__ = ["Card", "CardState", "Difficulty", "Grade", "MemoryState", "Note", "RateResult"]
