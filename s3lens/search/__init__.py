"""Ranking helpers shared by the explorer filter and history filter."""

from .fuzzy import fuzzy_score, rank_labels

__all__ = ["fuzzy_score", "rank_labels"]
