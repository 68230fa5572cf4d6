"""
RLSight - Rocket League Replay Reducer

Rebuilds match state from a decoded replay's per-frame entity mutations and
derives the statistics the replay never records directly: possession, zone
occupancy, boost economy, kickoffs, ball proximity, game-winning goal and MVP.

Usage:
    from rlsight import analyze_replay

    report = analyze_replay(document)
    for key, player in report["player_data"]["blue"].items():
        print(f"{player['Name']}: {player['AVG_Boost']}% boost")
"""

__version__ = "0.3.0"
__author__ = "RLSight Contributors"


def __getattr__(name):
    """Lazy import for heavy dependencies."""
    # Parser
    if name == "ReplayParser":
        from rlsight.core.parser import ReplayParser
        return ReplayParser
    elif name == "ReplayData":
        from rlsight.core.parser import ReplayData
        return ReplayData
    elif name == "parse_replay":
        from rlsight.core.parser import parse_replay
        return parse_replay
    # Analysis
    elif name == "ClockAligner":
        from rlsight.analysis.clock import ClockAligner
        return ClockAligner
    elif name == "ReplayAnalyzer":
        from rlsight.analysis.analytics import ReplayAnalyzer
        return ReplayAnalyzer
    # Pipeline
    elif name == "ReplayOrchestrator":
        from rlsight.pipeline.orchestrator import ReplayOrchestrator
        return ReplayOrchestrator
    elif name == "analyze_replay":
        from rlsight.pipeline.orchestrator import analyze_replay
        return analyze_replay
    raise AttributeError(f"module 'rlsight' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Parser
    "ReplayParser",
    "ReplayData",
    "parse_replay",
    # Analysis
    "ClockAligner",
    "ReplayAnalyzer",
    # Pipeline
    "ReplayOrchestrator",
    "analyze_replay",
]
