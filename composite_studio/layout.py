from __future__ import annotations
import math
from typing import List, NamedTuple, Optional, Tuple

from .models import ScriptParameters


class Cell(NamedTuple):
    x: float
    y: float
    w: float
    h: float

    def overlaps(self, other: "Cell", eps: float = 1e-6) -> bool:
        # Shared edges are not overlap; eps absorbs float drift in the partition
        return (self.x < other.x + other.w - eps and other.x < self.x + self.w - eps
                and self.y < other.y + other.h - eps and other.y < self.y + self.h - eps)


def grid_shape(n: int, cols: Optional[int] = None, rows: Optional[int] = None) -> Tuple[int, int]:
    """Near-square grid for ``n`` tiles: ``cols = ceil(sqrt(n))``, ``rows = ceil(n / cols)``.

    A requested column count is honoured. A requested row count picks the
    column count instead, and rows are always recomputed from the columns so
    the last row is never empty.
    """
    if n < 1:
        raise ValueError("grid needs at least one tile")
    if cols:
        c = cols
    elif rows:
        c = int(math.ceil(n / rows))
    else:
        c = int(math.ceil(math.sqrt(n)))
    return c, int(math.ceil(n / c))


def grid_cells(n: int, params: ScriptParameters) -> List[Cell]:
    cols, rows = grid_shape(n, params.grid_cols, params.grid_rows)
    avail_w = params.canvas_width - 2 * params.padding
    avail_h = params.canvas_height - 2 * params.padding
    cw, ch = avail_w / cols, avail_h / rows
    return [
        Cell(params.padding + (i % cols) * cw, params.padding + (i // cols) * ch, cw, ch)
        for i in range(n)
    ]


def fitted_tile_width(cell: Cell, params: ScriptParameters) -> float:
    # Inner area left after the border on both sides and the inter-cell gap
    max_w = cell.w - 2 * params.border - params.cell_gap
    return max(1.0, min(float(params.tile_width), max_w))


def centered_in(cell: Cell, w: float, h: float) -> Tuple[float, float]:
    return cell.x + (cell.w - w) / 2, cell.y + (cell.h - h) / 2
