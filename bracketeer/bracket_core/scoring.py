"""
Configurable scoring systems for standings.

This module defines how decided matches are converted to standings points.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoringSystem:
    """Defines how match outcomes are scored in a standings table."""

    win_points: int = 3
    draw_points: int = 1
    loss_points: int = 0

    # Swiss byes count as a win
    bye_points: int = 3

    def points(self, won: bool, draw: bool = False) -> int:
        """Get points for an outcome."""
        if draw:
            return self.draw_points
        return self.win_points if won else self.loss_points


# Pre-defined scoring systems
STANDARD_SCORING = ScoringSystem()

# Chess-style scoring, occasionally used for Swiss events
TWO_ONE_ZERO_SCORING = ScoringSystem(
    win_points=2,
    draw_points=1,
    loss_points=0,
    bye_points=2,
)
