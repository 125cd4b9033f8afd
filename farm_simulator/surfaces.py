# farm_simulator/surfaces.py

"""
================================================================================
LAYER SURFACE SYNTHESIS
================================================================================
Builds the normalized [0, 1] surfaces for each agronomic layer and converts
them to realistic physical units.

Data Contract:
---------------
- Inputs:
    - rows, cols: Target grid dimensions.
    - seed: Integer seed for the layer.
    - settings (dict, optional): Overrides for lattice shapes, octave weights
      and trend strength.
- Outputs:
    - Matrix2D of normalized floats, or of physical values once mapped.
- Side Effects: None.
- Invariants: Given the same seed, dimensions and settings, the output is
  identical. Mapped values always lie inside config.LAYER_RANGES.
================================================================================
"""

import numpy as np

from . import config as DEFAULTS
from . import noise
from .matrix import Matrix2D

def _unit_axis(length: int) -> np.ndarray:
    """Normalized positions 0..1 along an axis; a single-cell axis sits at 0."""
    if length <= 1:
        return np.zeros(length)
    return np.arange(length) / (length - 1)

def synthesize_surface(rows: int, cols: int, seed: int, settings: dict = None) -> Matrix2D:
    """
    Generates a spatially coherent surface by blending two octaves of coarse
    value noise plus a gentle linear trend, then clamping to [0, 1].
    """
    settings = settings or {}
    coarse_w, coarse_h = settings.get('coarse_lattice_shape', DEFAULTS.COARSE_LATTICE_SHAPE)
    fine_w, fine_h = settings.get('fine_lattice_shape', DEFAULTS.FINE_LATTICE_SHAPE)
    coarse_weight = settings.get('coarse_weight', DEFAULTS.COARSE_WEIGHT)
    fine_weight = settings.get('fine_weight', DEFAULTS.FINE_WEIGHT)
    trend_strength = settings.get('trend_strength', DEFAULTS.TREND_STRENGTH)

    # 1. Two independent lattices; the second seed is an LCG step of the first.
    coarse = noise.make_lattice(coarse_w, coarse_h, seed)
    fine = noise.make_lattice(fine_w, fine_h, noise.derive_secondary_seed(seed))

    # 2. Normalized coordinates of every target cell (u across, v up).
    u, v = np.meshgrid(_unit_axis(cols), _unit_axis(rows))

    # 3. Two-octave blend.
    n1 = noise.bilinear_sample_2d(coarse, u, v)
    n2 = noise.bilinear_sample_2d(fine, u, v)
    surface = coarse_weight * n1 + fine_weight * n2

    # 4. Slope-like gradient rising to the east and falling to the north.
    surface += trend_strength * (u - v)

    return Matrix2D(np.clip(surface, 0.0, 1.0))

# --- Unit Mapping ---

def round_half_up(values: np.ndarray) -> np.ndarray:
    """Rounds .5 away from zero for non-negative inputs (np.round would go to even)."""
    return np.floor(values + 0.5).astype(np.int64)

def map_acidity(x: np.ndarray) -> np.ndarray:
    """pH 4.5 .. 8.5"""
    return 4.5 + x * 4.0

def map_nitrogen(x: np.ndarray) -> np.ndarray:
    """kg/ha 0 .. 240"""
    return round_half_up(240 * x)

def map_stoniness(x: np.ndarray) -> np.ndarray:
    """% of surface 0 .. 30"""
    return round_half_up(30 * np.power(x, 1.2))

def map_weeds(x: np.ndarray) -> np.ndarray:
    """% density 0 .. 100"""
    return round_half_up(100 * np.power(x, 1.1))

UNIT_MAPPERS = {
    "acidity": map_acidity,
    "nitrogen": map_nitrogen,
    "stoniness": map_stoniness,
    "weeds": map_weeds,
}

def to_physical_units(layer: str, normalized: Matrix2D) -> Matrix2D:
    """Converts a normalized layer surface into its physical units."""
    return normalized.map(UNIT_MAPPERS[layer])
