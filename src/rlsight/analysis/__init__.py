"""
RLSight Analysis - Clock alignment and match analytics.

This module contains:
- clock: Frame <-> match-second alignment, overtime handling
- analytics: Main analytics engine (ReplayAnalyzer)
- boost, zones, possession, kickoffs, proximity, outcome: one statistic each
- models: Result dataclasses
"""

from rlsight.analysis.clock import ClockAligner
from rlsight.analysis.models import MatchAnalysis, PlayerMatchStats, TeamMatchStats

__all__: list[str] = [
    "ClockAligner",
    "MatchAnalysis",
    "PlayerMatchStats",
    "TeamMatchStats",
]
