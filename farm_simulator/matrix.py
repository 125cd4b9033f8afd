# farm_simulator/matrix.py

"""
A small read-only 2D matrix indexed by (row, column).

Layer surfaces are stored in these instead of bare nested lists so that an
out-of-range index fails loudly instead of silently wrapping around, which
is what a negative NumPy index would do.
"""
import numpy as np

class Matrix2D:
    """Immutable, bounds-checked wrapper around a 2D NumPy array."""

    def __init__(self, data):
        array = np.array(data, copy=True)
        if array.ndim != 2:
            raise ValueError(f"Matrix2D needs 2D data, got shape {array.shape}")
        array.setflags(write=False)
        self._data = array

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> tuple:
        return self._data.shape

    @property
    def dtype(self):
        return self._data.dtype

    def _check_index(self, row: int, col: int):
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(
                f"Cell ({row}, {col}) is outside a {self.rows}x{self.cols} matrix"
            )

    def __getitem__(self, index):
        row, col = index
        self._check_index(row, col)
        return self._data[row, col].item()

    def as_array(self) -> np.ndarray:
        """Returns the underlying array. It is flagged read-only."""
        return self._data

    def flat(self) -> np.ndarray:
        """Row-major flattened view, aligned with the grid's cell order."""
        return self._data.ravel()

    def map(self, func) -> "Matrix2D":
        """Applies a vectorized function and wraps the result in a new matrix."""
        return Matrix2D(func(self._data))

    def min(self):
        return self._data.min().item()

    def max(self):
        return self._data.max().item()

    def __eq__(self, other):
        if not isinstance(other, Matrix2D):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    def __repr__(self):
        return f"Matrix2D({self.rows}x{self.cols}, dtype={self.dtype})"
