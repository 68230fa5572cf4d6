"""
RLSight Pipeline - Replay analysis orchestration.

This module handles the complete replay processing pipeline:
- Document validation and reconstruction (ReplayParser)
- Analysis execution (ReplayAnalyzer)
- Result serialization (contract-checked report)
"""

from rlsight.pipeline.orchestrator import ReplayOrchestrator, analyze_replay

__all__ = ["ReplayOrchestrator", "analyze_replay"]
