"""
Baseline Autopilot Agent - Jumps when below the next gap.

This is a simple heuristic agent that reads the obstacle arrays to find the
next gap the player still has to clear, and jumps whenever the player is
falling and has sunk close to that gap's lower edge.

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark to compare against
3. A verification that the environment API works correctly

Strategy:
- Find the first obstacle that is present and not yet passed
- Aim to hover just above its gap bottom (or mid-screen when no obstacle)
- Jump only while falling, so one jump is spent per dip
"""

from typing import Any, Dict, Optional

import numpy as np

# Distance above the gap bottom (in addition to the radius) that triggers a jump
JUMP_CLEARANCE = 20.0


class GapfallAgent:
    """
    Heuristic agent that keeps the player in the lower part of the next gap.
    """

    def __init__(self, clearance: float = JUMP_CLEARANCE, debug: bool = False):
        """
        Initialize the agent.

        Args:
            clearance: Extra distance above the gap bottom that triggers a jump.
            debug: If True, print decisions to stdout.
        """
        self.clearance = clearance
        self.debug = debug

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset agent state for a new episode (stateless)."""
        pass

    def target_y(self, observation: Dict[str, Any]) -> float:
        """Y coordinate below which the agent jumps."""
        radius = float(observation["player_radius"])
        mask = observation["obs_mask"].astype(bool)
        pending = mask & (observation["obs_passed"] == 0)

        if not pending.any():
            return float(observation["area_height"]) / 2.0

        index = int(np.argmax(pending))
        gap_bottom = float(observation["obs_gap_bottom"][index])
        return gap_bottom - radius - self.clearance

    def act(self, observation: Dict[str, Any], debug: bool = False) -> int:
        """
        Decide whether to jump this frame.

        Args:
            observation: Dict of numpy arrays from the environment.
            debug: If True, print debug info for this step.

        Returns:
            1 to jump, 0 otherwise.
        """
        y = float(observation["player_y"])
        velocity = float(observation["player_velocity"])
        target = self.target_y(observation)

        action = 1 if (y > target and velocity >= 0.0) else 0

        if debug or self.debug:
            print(f"[Autopilot] y={y:.1f} v={velocity:.2f} "
                  f"target={target:.1f} action={action}")

        return action


def create_agent(**kwargs) -> GapfallAgent:
    """Factory function to create an agent instance."""
    return GapfallAgent(**kwargs)
