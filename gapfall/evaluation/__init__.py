"""
Evaluation Package
==================

Contains the seed bank and evaluation harness for scoring agents.
"""

from gapfall.evaluation.run_eval import (
    evaluate_agent, evaluate_variants, load_agent, load_seed_bank
)

__all__ = ["evaluate_agent", "evaluate_variants", "load_agent", "load_seed_bank"]
