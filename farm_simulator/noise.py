# farm_simulator/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides the deterministic random stream used by every part of
the simulator, plus the coarse value lattices and the bilinear sampler that
turn that stream into smooth surfaces.

Data Contract:
---------------
- Inputs:
    - seed: Any Python integer. It is reduced modulo 2**32.
    - lattice: A 2D NumPy array of lattice values (height x width).
    - u, v: NumPy arrays of normalized coordinates in [0, 1].
- Outputs:
    - Floats in [0, 1) from the stream, lattices of the same, and sampled
      arrays shaped like u and v.
- Side Effects: None. A NoiseSource only mutates its own cursor.
- Invariants: The same seed always yields the same sequence, bit for bit.
================================================================================
"""

import numpy as np
from numba import njit
from scipy.ndimage import map_coordinates

from . import config as DEFAULTS

UINT32_MASK = 0xFFFFFFFF
UINT32_RANGE = 4294967296.0

@njit
def _xorshift32_block(state, count):
    """
    Advances an xorshift32 state `count` times and returns the normalized
    outputs together with the final state. JIT-compiled with Numba; the state
    is kept in a 64-bit integer and masked back to 32 bits after each left
    shift.
    """
    out = np.empty(count)
    x = state
    for i in range(count):
        x ^= (x << 13) & UINT32_MASK
        x ^= x >> 17
        x ^= (x << 5) & UINT32_MASK
        out[i] = x / UINT32_RANGE
    return out, x

def seed_to_state(seed: int) -> int:
    """Reduces an arbitrary integer seed to a valid, non-zero xorshift32 state."""
    state = int(seed) & UINT32_MASK
    if state == 0:
        return DEFAULTS.ZERO_SEED_REPLACEMENT
    return state

def derive_secondary_seed(seed: int) -> int:
    """Mixes a seed through one linear-congruential step to decorrelate octaves."""
    return (int(seed) * DEFAULTS.LCG_MULTIPLIER + DEFAULTS.LCG_INCREMENT) & UINT32_MASK

class NoiseSource:
    """
    A restartable, infinite stream of floats in [0, 1) driven by xorshift32.

    Every consumer of randomness receives its own instance, so nothing in the
    simulator depends on global random state.
    """
    def __init__(self, seed: int):
        self.seed = seed
        self._initial_state = seed_to_state(seed)
        self._state = self._initial_state

    def take(self, count: int) -> np.ndarray:
        """Returns the next `count` values of the stream as a float array."""
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        values, self._state = _xorshift32_block(self._state, count)
        return values

    def next(self) -> float:
        return float(self.take(1)[0])

    def reset(self):
        """Rewinds the stream to its first value."""
        self._state = self._initial_state

    def __iter__(self):
        while True:
            yield self.next()

    def __repr__(self):
        return f"NoiseSource(seed={self.seed})"

def make_lattice(width: int, height: int, seed: int) -> np.ndarray:
    """
    Builds a (height x width) lattice of independent values, filled row by
    row from a fresh stream seeded with `seed`.
    """
    source = NoiseSource(seed)
    return source.take(width * height).reshape(height, width)

def bilinear_sample_2d(lattice: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    Samples a lattice at normalized coordinates with bilinear interpolation.

    u runs across the lattice columns and v across its rows. At u or v == 1
    the sample lands exactly on the last column/row; the missing neighbour is
    clamped ('nearest') rather than wrapped or extrapolated.
    """
    height, width = lattice.shape
    rows_idx = v * (height - 1)
    cols_idx = u * (width - 1)
    coords = np.array([rows_idx.ravel(), cols_idx.ravel()])
    sampled = map_coordinates(lattice, coords, order=1, mode='nearest')
    return sampled.reshape(u.shape)
