# farm_simulator/grid.py

"""
================================================================================
GRID TESSELLATION
================================================================================
Partitions the bounding box into rows x cols axis-aligned cells. Row 0 is the
southernmost band and column 0 the westernmost. The grid is computed once and
never changes; every later lookup reuses the same polygons and centroids.

Data Contract:
---------------
- Inputs: A BoundingBox and the (rows, cols) resolution.
- Outputs: GridCell objects in row-major order, flat centroid arrays, and
  cell lookups for arbitrary coordinates.
- Side Effects: None.
- Invariants: Cells tile the box exactly, without gaps or overlaps.
================================================================================
"""

import math
from dataclasses import dataclass

import numpy as np
from shapely.geometry import Polygon, box, mapping

@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in (lng, lat) degrees."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self):
        if not (self.max_x > self.min_x and self.max_y > self.min_y):
            raise ValueError(f"Degenerate bounding box: {self.as_list()}")

    @classmethod
    def from_sequence(cls, values) -> "BoundingBox":
        min_x, min_y, max_x, max_y = (float(v) for v in values)
        return cls(min_x, min_y, max_x, max_y)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> tuple:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def as_list(self) -> list:
        return [self.min_x, self.min_y, self.max_x, self.max_y]

    def to_polygon(self) -> Polygon:
        return box(self.min_x, self.min_y, self.max_x, self.max_y)

@dataclass(frozen=True)
class GridCell:
    row: int
    col: int
    polygon: Polygon
    centroid: tuple

class Grid:
    """The fixed cell tessellation of a bounding box."""

    def __init__(self, bbox: BoundingBox, rows: int, cols: int):
        if rows < 1 or cols < 1:
            raise ValueError(f"Grid needs at least one row and column, got {rows}x{cols}")
        self.bbox = bbox
        self.rows = rows
        self.cols = cols
        self.dx = bbox.width / cols
        self.dy = bbox.height / rows

        cells = []
        for r in range(rows):
            for c in range(cols):
                min_x = bbox.min_x + c * self.dx
                min_y = bbox.min_y + r * self.dy
                max_x = min_x + self.dx
                max_y = min_y + self.dy
                polygon = Polygon([(min_x, min_y), (max_x, min_y), (max_x, max_y), (min_x, max_y)])
                centroid = ((min_x + max_x) / 2, (min_y + max_y) / 2)
                cells.append(GridCell(r, c, polygon, centroid))
        self._cells = tuple(cells)

        # Flat row-major centroid coordinates for vectorized membership tests.
        centroids = np.array([cell.centroid for cell in self._cells])
        self.centroids_x = centroids[:, 0]
        self.centroids_y = centroids[:, 1]
        self.centroids_x.setflags(write=False)
        self.centroids_y.setflags(write=False)

        # Coordinates inside these mappings are tuples and safe to share.
        self._geometries = tuple(mapping(cell.polygon) for cell in self._cells)

    def __len__(self):
        return len(self._cells)

    def __iter__(self):
        return iter(self._cells)

    def _index(self, row: int, col: int) -> int:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f"Cell ({row}, {col}) is outside a {self.rows}x{self.cols} grid")
        return row * self.cols + col

    def cell(self, row: int, col: int) -> GridCell:
        return self._cells[self._index(row, col)]

    def geometry(self, row: int, col: int) -> dict:
        """GeoJSON geometry of a cell, as a fresh dict."""
        return dict(self._geometries[self._index(row, col)])

    def locate(self, x: float, y: float) -> tuple:
        """
        Maps a coordinate to the (row, col) of its enclosing cell. Points
        outside the box snap to the nearest edge cell instead of failing.
        """
        u = _clamp_unit((x - self.bbox.min_x) / self.bbox.width)
        v = _clamp_unit((y - self.bbox.min_y) / self.bbox.height)
        col = min(self.cols - 1, math.floor(u * self.cols))
        row = min(self.rows - 1, math.floor(v * self.rows))
        return row, col

def _clamp_unit(value: float) -> float:
    """Clamps to [0, 1] before any flooring; infinities land on an edge, NaN on 0."""
    if not value > 0.0:
        return 0.0
    return min(value, 1.0)
