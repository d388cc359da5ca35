"""
Evaluation Harness
==================

Flies an agent through every seed of the seed bank, per game variant, and
reports how episodes ended: wins, out-of-bounds and collision losses, and
runs cut off by the tick cap. Extended-variant runs also report skip events
and boost windows.

Usage:
    python -m gapfall.evaluation.run_eval --agent agents/baseline_autopilot --variant both
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import os
import sys
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from gapfall.core.config_loader import VARIANTS, GameConfig, load_config
from gapfall.core.env_gym import GapfallEnv
from gapfall.core.rules import REASON_TARGET

# 60 fps for ~3 minutes; long enough to reach the target on any seed
DEFAULT_MAX_TICKS = 10_000

OUTCOME_WON = "won"
OUTCOME_TICK_CAP = "tick_cap"

AgentFn = Callable[[Dict[str, np.ndarray]], int]


@dataclass
class EpisodeResult:
    """How one seeded episode went."""
    seed: int
    score: int
    ticks: int
    outcome: str       # won, out_of_bounds, collision or tick_cap
    skips: int
    boosts: int
    elapsed: float


@dataclass
class VariantReport:
    """All episodes of one variant, with aggregate views."""
    variant: str
    episodes: List[EpisodeResult] = field(default_factory=list)

    @property
    def scores(self) -> np.ndarray:
        return np.array([e.score for e in self.episodes], dtype=np.int64)

    @property
    def win_rate(self) -> float:
        if not self.episodes:
            return 0.0
        return self.outcomes[OUTCOME_WON] / len(self.episodes)

    @property
    def outcomes(self) -> Counter:
        return Counter(e.outcome for e in self.episodes)

    @property
    def total_skips(self) -> int:
        return sum(e.skips for e in self.episodes)

    @property
    def boosted_episodes(self) -> int:
        return sum(1 for e in self.episodes if e.boosts > 0)

    def as_dict(self) -> dict:
        scores = self.scores
        return {
            "variant": self.variant,
            "episodes": len(self.episodes),
            "win_rate": self.win_rate,
            "outcomes": dict(self.outcomes),
            "score": {
                "mean": float(scores.mean()),
                "std": float(scores.std()),
                "median": float(np.median(scores)),
                "min": int(scores.min()),
                "max": int(scores.max()),
            },
            "mean_ticks": float(np.mean([e.ticks for e in self.episodes])),
            "skips": self.total_skips,
            "boosted_episodes": self.boosted_episodes,
            "per_seed": [
                {"seed": e.seed, "score": e.score, "ticks": e.ticks, "outcome": e.outcome,
                 "skips": e.skips, "boosts": e.boosts}
                for e in self.episodes
            ],
        }

    def describe(self) -> str:
        """Multi-line console summary."""
        scores = self.scores
        ended = ", ".join(f"{name} {count}" for name, count in sorted(self.outcomes.items()))
        lines = [
            f"[{self.variant}] {len(self.episodes)} seeds, win rate {self.win_rate:.0%}",
            f"  score   mean {scores.mean():.2f} +/- {scores.std():.2f}, "
            f"median {np.median(scores):.1f}, range {scores.min()}..{scores.max()}",
            f"  endings {ended}",
        ]
        if self.total_skips or self.boosted_episodes:
            lines.append(
                f"  extras  {self.total_skips} skip events, "
                f"boost reached in {self.boosted_episodes} episodes"
            )
        return "\n".join(lines)


def load_seed_bank(path: Optional[str] = None) -> List[int]:
    """Read the seed list from seed_bank.json (the packaged one by default)."""
    if path is None:
        path = os.path.join(os.path.dirname(__file__), "seed_bank.json")

    with open(path, "r") as f:
        return [int(s) for s in json.load(f)["seeds"]]


def load_agent(agent_path: str) -> AgentFn:
    """
    Import an agent module by path and return its act callable.

    The module may expose create_agent(), a GapfallAgent class, or a bare
    act(obs) function; the first one found wins.

    Raises:
        FileNotFoundError: If no agent.py exists at the path.
        AttributeError: If the module exposes none of the entry points.
    """
    path = Path(agent_path)
    agent_file = path / "agent.py" if path.is_dir() else path
    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    module_name = f"gapfall_agent_{agent_file.parent.name}"
    spec = importlib.util.spec_from_file_location(module_name, agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {agent_file}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    if hasattr(module, "create_agent"):
        return module.create_agent().act
    if hasattr(module, "GapfallAgent"):
        return module.GapfallAgent().act
    if hasattr(module, "act"):
        return module.act
    raise AttributeError(
        f"{agent_file} defines neither create_agent, GapfallAgent, nor act"
    )


def run_episode(
    agent_fn: AgentFn,
    seed: int,
    config: GameConfig,
    max_ticks: int = DEFAULT_MAX_TICKS
) -> EpisodeResult:
    """Play one seeded episode until it ends or hits the tick cap."""
    env = GapfallEnv(config=config, max_episode_ticks=max_ticks)
    started = time.perf_counter()
    skips = 0
    boosts = 0

    obs, info = env.reset(seed=seed)
    terminated = truncated = False
    while not (terminated or truncated):
        obs, _, terminated, truncated, info = env.step(int(agent_fn(obs)))
        skips += info["skips"]
        boosts += int(info["boost_armed"])
    env.close()

    if info["terminated_reason"] == REASON_TARGET:
        outcome = OUTCOME_WON
    elif info["terminated_reason"]:
        outcome = info["terminated_reason"]
    else:
        outcome = OUTCOME_TICK_CAP

    return EpisodeResult(
        seed=seed,
        score=info["score"],
        ticks=info["ticks"],
        outcome=outcome,
        skips=skips,
        boosts=boosts,
        elapsed=time.perf_counter() - started
    )


def evaluate_agent(
    agent_fn: AgentFn,
    seeds: Optional[Sequence[int]] = None,
    config: Optional[GameConfig] = None,
    max_ticks: int = DEFAULT_MAX_TICKS,
    verbose: bool = True
) -> VariantReport:
    """
    Run the agent on every seed under one config.

    Raises:
        ValueError: If the seed list is empty.
    """
    if seeds is None:
        seeds = load_seed_bank()
    if not seeds:
        raise ValueError("Seed list is empty")
    if config is None:
        config = load_config()

    report = VariantReport(variant=config.variant)
    for seed in seeds:
        episode = run_episode(agent_fn, seed, config, max_ticks)
        report.episodes.append(episode)
        if verbose:
            print(f"  {config.variant} seed {seed:>6}: {episode.outcome:<13} "
                  f"score {episode.score:>3} after {episode.ticks} ticks")

    if verbose:
        print(report.describe())
    return report


def evaluate_variants(
    agent_fn: AgentFn,
    variants: Sequence[str] = VARIANTS,
    seeds: Optional[Sequence[int]] = None,
    config_path: Optional[str] = None,
    max_ticks: int = DEFAULT_MAX_TICKS,
    verbose: bool = True
) -> Dict[str, VariantReport]:
    """Evaluate the same agent and seeds under each variant."""
    return {
        variant: evaluate_agent(
            agent_fn,
            seeds=seeds,
            config=load_config(config_path, variant=variant),
            max_ticks=max_ticks,
            verbose=verbose
        )
        for variant in variants
    }


def write_report(reports: Dict[str, VariantReport], agent_name: str, output_path: str) -> None:
    """Dump every variant report to one JSON file."""
    payload = {
        "agent": agent_name,
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "variants": {name: report.as_dict() for name, report in reports.items()},
    }
    with open(output_path, "w") as f:
        json.dump(payload, f, indent=2)


def main():
    parser = argparse.ArgumentParser(description="Evaluate a Gapfall agent on the seed bank")
    parser.add_argument("--agent", required=True, help="Agent directory or agent.py file")
    parser.add_argument("--variant", choices=list(VARIANTS) + ["both"], default="both",
                        help="Variant to evaluate (default: both)")
    parser.add_argument("--config", default=None, help="Path to game_config.yaml")
    parser.add_argument("--seeds", default=None, help="Seed bank JSON (default: packaged)")
    parser.add_argument("--max-ticks", type=int, default=DEFAULT_MAX_TICKS,
                        help="Tick cap per episode")
    parser.add_argument("--output", default=None, help="Write the report as JSON here")
    parser.add_argument("--quiet", action="store_true", help="Only print the summaries")
    args = parser.parse_args()

    try:
        agent_fn = load_agent(args.agent)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        print(f"Error loading agent: {e}")
        return 1

    variants = VARIANTS if args.variant == "both" else (args.variant,)
    seeds = load_seed_bank(args.seeds) if args.seeds else None

    reports = evaluate_variants(
        agent_fn,
        variants=variants,
        seeds=seeds,
        config_path=args.config,
        max_ticks=args.max_ticks,
        verbose=not args.quiet
    )
    if args.quiet:
        for report in reports.values():
            print(report.describe())

    if args.output:
        write_report(reports, Path(args.agent).name, args.output)
        print(f"Report written to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
