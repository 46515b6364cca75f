"""
Baseline Hint Agent Package

A greedy agent that plays the hint engine's recommendation, skipping
moves that revisit a layout. Serves as a benchmark and example.
"""

from .agent import SortAgent, create_agent

__all__ = ["SortAgent", "create_agent"]
