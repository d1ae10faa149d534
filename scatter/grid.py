"""
Grid occupancy tracking - keeps each zone's edge evenly populated
"""

import random
from typing import Dict, List, Tuple

import numpy as np

from .types import CanvasFrame, Zone, ZONE_ORDER

Cell = Tuple[int, int]  # (row, col)


class GridOccupancyTracker:
    """
    Per-cell placement counters over a rows x cols partition of the canvas

    Corner cells sit on two edges, so each zone keeps its own counters
    along its edge; placements from one zone never skew another zone's
    balance. counts holds the combined per-cell totals.

    One tracker belongs to exactly one layout call; it is never shared.
    """

    def __init__(self, canvas: CanvasFrame, rows: int = 3, cols: int = 4):
        if rows < 1 or cols < 1:
            raise ValueError(f"Grid needs at least one row and column, got {rows}x{cols}")

        self.canvas = canvas
        self.rows = rows
        self.cols = cols
        self.cell_width = canvas.width / cols
        self.cell_height = canvas.height / rows
        self.counts = np.zeros((rows, cols), dtype=int)
        self.zone_counts: Dict[Zone, np.ndarray] = {
            zone: np.zeros(len(self.edge_cells(zone)), dtype=int) for zone in ZONE_ORDER
        }

    def edge_cells(self, zone: Zone) -> List[Cell]:
        """Cells touching the zone's canvas edge, in scan order"""
        if zone == Zone.TOP:
            return [(0, col) for col in range(self.cols)]
        if zone == Zone.BOTTOM:
            return [(self.rows - 1, col) for col in range(self.cols)]
        if zone == Zone.LEFT:
            return [(row, 0) for row in range(self.rows)]
        return [(row, self.cols - 1) for row in range(self.rows)]

    def edge_counts(self, zone: Zone) -> List[int]:
        """Placements of this zone per edge cell"""
        return [int(count) for count in self.zone_counts[zone]]

    def least_populated_cell(self, zone: Zone, rng: random.Random) -> Cell:
        """
        Pick the edge cell holding the fewest of this zone's placements

        Args:
            zone: Zone whose edge cells are candidates
            rng: Random source used to break ties uniformly

        Returns:
            (row, col) of the chosen cell
        """
        cells = self.edge_cells(zone)
        counts = self.zone_counts[zone]
        lowest = counts.min()
        ties = [cell for cell, count in zip(cells, counts) if count == lowest]
        return rng.choice(ties)

    def cell_bounds(self, cell: Cell) -> Tuple[float, float, float, float]:
        """(x_min, x_max, y_min, y_max) of a cell"""
        row, col = cell
        return (
            col * self.cell_width,
            (col + 1) * self.cell_width,
            row * self.cell_height,
            (row + 1) * self.cell_height,
        )

    def cell_at(self, x: float, y: float) -> Cell:
        """Cell containing a point (points on the far edges map inward)"""
        col = min(max(int(x // self.cell_width), 0), self.cols - 1)
        row = min(max(int(y // self.cell_height), 0), self.rows - 1)
        return row, col

    def record(self, x: float, y: float, zone: Zone) -> Cell:
        """
        Count a placement at the cell containing its anchor

        The zone's counter advances at the edge position the anchor
        projects onto: its column for top/bottom, its row for left/right.
        """
        cell = self.cell_at(x, y)
        self.counts[cell] += 1

        row, col = cell
        position = col if zone in (Zone.TOP, Zone.BOTTOM) else row
        self.zone_counts[zone][position] += 1
        return cell
