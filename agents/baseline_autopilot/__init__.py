"""
Baseline Autopilot Agent Package

A simple heuristic agent that jumps whenever it sinks below the next gap.
Serves as a benchmark and example.
"""

from .agent import GapfallAgent, create_agent

__all__ = ["GapfallAgent", "create_agent"]
