# farm_simulator/query.py

"""Point lookups against the physical layer matrices."""

from .grid import Grid

class PointQueryEngine:
    """
    Maps an arbitrary coordinate to its grid cell and reads every layer there.
    Total: coordinates outside the box are clamped to the nearest edge cell.
    """
    def __init__(self, grid: Grid, layers: dict):
        self.grid = grid
        self.layers = layers

    def values_at(self, x: float, y: float) -> dict:
        row, col = self.grid.locate(x, y)
        return self.values_at_cell(row, col)

    def values_at_cell(self, row: int, col: int) -> dict:
        return {name: matrix[row, col] for name, matrix in self.layers.items()}
