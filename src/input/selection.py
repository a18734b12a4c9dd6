"""Move selector: turns square clicks into finalized move strings.

Selection is LOCAL ONLY and never sent over the network. The selector
never decides whose turn it is; the turn synchronizer only forwards
clicks to it during the local turn.
"""

from __future__ import annotations

from enum import Enum, auto

from src.networking.protocol import PromotionPiece
from src.simulation.rules import is_promotion, move_squares


class SelectionPhase(Enum):
    IDLE = auto()
    SQUARE_SELECTED = auto()
    AWAITING_PROMOTION = auto()


class MoveSelector:
    """Two-click move entry with a promotion sub-step.

    Attributes:
        phase: Current selection phase.
        selected_square: python-chess square of the first click, or None.
        promotion_prefix: The four-character from/to part of a pending
            promotion move, or None.
        promotion_anchor: Screen position of the click that opened the
            promotion prompt, for the presentation layer.
    """

    def __init__(self) -> None:
        self.phase = SelectionPhase.IDLE
        self.selected_square: int | None = None
        self.promotion_prefix: str | None = None
        self.promotion_anchor: tuple[int, int] | None = None

    def reset(self) -> None:
        self.phase = SelectionPhase.IDLE
        self.selected_square = None
        self.promotion_prefix = None
        self.promotion_anchor = None

    def click_square(
        self,
        square: int,
        legal_moves: set[str],
        anchor: tuple[int, int] | None = None,
    ) -> str | None:
        """Handle a click on a board square.

        Returns the finalized move string when the click completes a
        non-promotion move, otherwise None.
        """
        if self.phase is SelectionPhase.AWAITING_PROMOTION:
            # Only a promotion choice can close the prompt.
            return None

        if self.phase is SelectionPhase.IDLE:
            self.phase = SelectionPhase.SQUARE_SELECTED
            self.selected_square = square
            return None

        from_sq = self.selected_square
        # Sorted so the first match is deterministic when several
        # promotion moves share the same squares.
        match = next(
            (m for m in sorted(legal_moves) if move_squares(m) == (from_sq, square)),
            None,
        )
        if match is None:
            self.reset()
            return None

        if is_promotion(match):
            self.phase = SelectionPhase.AWAITING_PROMOTION
            self.promotion_prefix = match[:4]
            self.promotion_anchor = anchor
            return None

        self.reset()
        return match

    def choose_promotion(self, piece: PromotionPiece) -> str | None:
        """Resolve a pending promotion. Returns the finalized move string."""
        if self.phase is not SelectionPhase.AWAITING_PROMOTION:
            return None
        move_str = self.promotion_prefix + piece.code
        self.reset()
        return move_str

    def targets(self, legal_moves: set[str]) -> set[int]:
        """Destination squares reachable from the selected square."""
        if self.selected_square is None:
            return set()
        targets = set()
        for m in legal_moves:
            from_sq, to_sq = move_squares(m)
            if from_sq == self.selected_square:
                targets.add(to_sq)
        return targets
