"""
D4 symmetry transforms for TicTacToe (8 transforms).

Rotations: 0°, 90°, 180°, 270°
Reflections: horizontal, vertical, main diagonal, anti-diagonal

Used to fold equivalent positions into a single matchbox.
"""

from typing import List, Tuple


def _idx(r: int, c: int) -> int:
    """Convert (row, col) to flat index."""
    return r * 3 + c


def _build_symmetry_maps() -> List[Tuple[int, ...]]:
    """Build 8 permutation maps; map[i] is the source cell shown at cell i."""
    maps = []
    for k in range(8):
        mp = [0] * 9
        for r in range(3):
            for c in range(3):
                if k == 0:   rt, ct = r, c                # identity
                elif k == 1: rt, ct = c, 2 - r            # rotate 90
                elif k == 2: rt, ct = 2 - r, 2 - c        # rotate 180
                elif k == 3: rt, ct = 2 - c, r            # rotate 270
                elif k == 4: rt, ct = r, 2 - c            # reflect horizontal
                elif k == 5: rt, ct = 2 - r, c            # reflect vertical
                elif k == 6: rt, ct = c, r                # reflect main diag
                else:        rt, ct = 2 - c, 2 - r        # reflect anti-diag
                mp[_idx(rt, ct)] = _idx(r, c)
        maps.append(tuple(mp))
    return maps


SYM_MAPS = _build_symmetry_maps()


def apply_symmetry_board(board: List[int], sym_id: int) -> List[int]:
    """Apply symmetry transform sym_id (0-7) to board."""
    mp = SYM_MAPS[sym_id]
    return [board[mp[i]] for i in range(9)]


def apply_symmetry_cell(cell: int, sym_id: int) -> int:
    """Map a cell of the transformed board back to the original board."""
    return SYM_MAPS[sym_id][cell]


def get_all_symmetries(board: List[int]) -> List[List[int]]:
    """Return all 8 symmetric versions of a board."""
    return [apply_symmetry_board(board, k) for k in range(8)]
