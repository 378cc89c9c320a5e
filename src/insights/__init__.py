"""Commitment insight analysis."""

from .analyzer import CommitmentAnalyzer, analyze
from .models import CommitInsight

__all__ = ["CommitInsight", "CommitmentAnalyzer", "analyze"]
