"""
MENACE learning engine.

Each visited state owns a "matchbox": one set of beads per legal action.
Moves are drawn with probability proportional to bead counts, every draw is
recorded, and at the end of a game every recorded bead set is grown or
shrunk by the outcome's delta.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple

import torch

from .errors import InconsistentState, InvariantViolation, NoLegalActions
from .game import Outcome

logger = logging.getLogger(__name__)


class Adjust(IntEnum):
    """Bead deltas applied to every recorded move when a game ends."""
    WIN = 3
    LOSE = -1
    DRAW = 1


@dataclass
class Bead:
    """A set of same-action beads inside one matchbox."""
    action: int  # Cell played when a bead from this set is drawn
    count: int

    def __str__(self) -> str:
        return f"{{ action: {self.action}, count: {self.count} }}"


@dataclass
class MenaceConfig:
    """Engine hyperparameters."""

    # Beads per action in a freshly created matchbox
    initial_count: int = 2

    # Counts are never adjusted below this floor
    min_count: int = 0

    # Outcome deltas
    win: int = int(Adjust.WIN)
    draw: int = int(Adjust.DRAW)
    lose: int = int(Adjust.LOSE)

    def __post_init__(self):
        if self.initial_count <= 0:
            raise ValueError(f"initial_count must be positive, got {self.initial_count}")
        if self.min_count < 0:
            raise ValueError(f"min_count must be non-negative, got {self.min_count}")
        if self.initial_count < self.min_count:
            raise ValueError("initial_count must not be below min_count")

    def delta_for(self, outcome: Outcome) -> int:
        """Bead delta for a finished game, from MENACE's perspective."""
        if outcome == Outcome.WON_BY_AGENT:
            return self.win
        if outcome == Outcome.WON_BY_OPPONENT:
            return self.lose
        if outcome == Outcome.DRAW:
            return self.draw
        raise ValueError(f"No adjustment for unfinished game ({outcome.name})")


def sample_index(counts: Sequence[int], generator: Optional[torch.Generator] = None) -> int:
    """
    Draw an index with probability count_i / sum(counts).

    Works on a snapshot of the counts; when every count is zero the draw is
    uniform so a starved matchbox stays playable.
    """
    if len(counts) == 0:
        raise ValueError("Cannot sample from an empty matchbox")

    weights = torch.tensor(counts, dtype=torch.float64)
    if weights.sum().item() <= 0:
        weights = torch.ones_like(weights)

    return int(torch.multinomial(weights, 1, generator=generator).item())


class Menace:
    """
    Matchbox Educable Noughts And Crosses Engine.

    Attributes:
        matchboxes: state key -> beads, one Bead per legal action at creation
        record: (state key, bead index) for every choice since the last adjust
    """

    def __init__(
        self,
        config: Optional[MenaceConfig] = None,
        matchboxes: Optional[Dict[str, List[Bead]]] = None,
        generator: Optional[torch.Generator] = None,
    ):
        self.config = config or MenaceConfig()
        self.matchboxes: Dict[str, List[Bead]] = matchboxes if matchboxes is not None else {}
        self.record: List[Tuple[str, int]] = []
        self.generator = generator

    def __len__(self) -> int:
        return len(self.matchboxes)

    def __contains__(self, state: str) -> bool:
        return state in self.matchboxes

    def ensure_state(self, state: str, legal_actions: Sequence[int]) -> List[Bead]:
        """
        Return the matchbox for state, creating it on first visit.

        An existing matchbox is returned unchanged; legal_actions is only
        consulted when the state is new.
        """
        beads = self.matchboxes.get(state)
        if beads is None:
            beads = [Bead(int(a), self.config.initial_count) for a in legal_actions]
            self.matchboxes[state] = beads
            logger.debug("New matchbox %s with %d actions", state, len(beads))
        return beads

    def choose(self, state: str, legal_actions: Sequence[int]) -> int:
        """
        Draw MENACE's next move for state and record it.

        Raises:
            NoLegalActions: the matchbox is empty (terminal state routed here)
            InconsistentState: the drawn action is not legal in the caller's game
        """
        beads = self.ensure_state(state, legal_actions)
        if not beads:
            raise NoLegalActions(state)

        index = sample_index([b.count for b in beads], self.generator)
        bead = beads[index]

        if bead.action not in legal_actions:
            raise InconsistentState(state, bead.action, legal_actions)

        self.record.append((state, index))
        return bead.action

    def adjust(self, delta: int) -> int:
        """
        Apply delta to every recorded bead set and clear the record.

        Each record entry is adjusted independently, so a (state, action)
        pair recorded twice receives the delta twice.

        Returns:
            Number of record entries applied
        """
        delta = int(delta)

        for state, index in self.record:
            beads = self.matchboxes.get(state)
            if beads is None:
                raise InvariantViolation(f"Recorded state {state!r} is missing from the table")
            if not 0 <= index < len(beads):
                raise InvariantViolation(
                    f"Recorded index {index} out of range for state {state!r} ({len(beads)} actions)"
                )

        floor = self.config.min_count
        for state, index in self.record:
            bead = self.matchboxes[state][index]
            bead.count = max(bead.count + delta, floor)

        applied = len(self.record)
        self.record.clear()
        if applied:
            logger.debug("Adjusted %d bead sets by %+d", applied, delta)
        return applied

    def reward(self, outcome: Outcome) -> int:
        """Adjust with the configured delta for a finished game."""
        return self.adjust(self.config.delta_for(outcome))

    def discard_episode(self):
        """Forget the current record without touching any weights."""
        self.record.clear()

    def best_action(self, state: str, legal_actions: Sequence[int]) -> Optional[int]:
        """
        Greedy, read-only lookup: the legal action with the most beads.

        Returns None for unseen states or when no stored action is legal.
        """
        beads = self.matchboxes.get(state)
        if not beads:
            return None
        candidates = [b for b in beads if b.action in legal_actions]
        if not candidates:
            return None
        return max(candidates, key=lambda b: b.count).action

    def reset(self):
        """Drop all learning."""
        self.matchboxes = {}
        self.record.clear()

    def snapshot(self) -> Dict[str, List[Tuple[int, int]]]:
        """Copy of the table as state -> [(action, count), ...]."""
        return {s: [(b.action, b.count) for b in beads] for s, beads in self.matchboxes.items()}

    def to_dict(self) -> Dict[str, List[Dict[str, int]]]:
        from .persistence import table_to_document
        return table_to_document(self.matchboxes)

    @classmethod
    def from_dict(
        cls,
        data,
        config: Optional[MenaceConfig] = None,
        generator: Optional[torch.Generator] = None,
    ) -> "Menace":
        from .persistence import document_to_table
        return cls(config=config, matchboxes=document_to_table(data), generator=generator)

    def save(self, path):
        from .persistence import save_table
        save_table(path, self.matchboxes)

    @classmethod
    def load(
        cls,
        path,
        config: Optional[MenaceConfig] = None,
        generator: Optional[torch.Generator] = None,
    ) -> "Menace":
        """
        Restore a table saved with save().

        Raises:
            PersistenceError: missing, unreadable or malformed file
        """
        from .persistence import load_table
        return cls(config=config, matchboxes=load_table(path), generator=generator)

    def __str__(self) -> str:
        lines = []
        for state, beads in self.matchboxes.items():
            lines.append(f"\"{state}\": [")
            for bead in beads:
                lines.append(f"    {bead},")
            lines.append("],")
        return "\n".join(lines)
