# farm_simulator/legends.py

"""
================================================================================
SHARED LEGEND & COLOR MAPPING UTILITIES
================================================================================
This module contains the legend table for each layer (unit label, ascending
bin thresholds, one color per bin) and the functions that bucket raw layer
values into those colors.

The table is served to map clients through `meta()`, and the same bucketing
is used by the offline baker to paint PNG previews.
================================================================================
"""
import copy

import numpy as np

from .errors import InvalidLayer

# --- Legend Table ---
# Ramps mimic the ones farm-management tools use for each attribute.
LEGENDS = {
    "nitrogen": {
        "unit": "kg/ha",
        "bins": [0, 20, 40, 60, 80, 100, 120, 140, 160, 180, 200, 220, 240],
        "colors": ["#c80000", "#ff3300", "#ff6600", "#ff9900", "#ffcc00", "#ffe600", "#e6ff00",
                   "#ccff00", "#99ff00", "#66ff00", "#33cc00", "#19b300", "#009900"],
    },
    "acidity": {
        "unit": "pH",
        "bins": [4.5, 5.0, 5.5, 6.0, 6.5, 7.0, 7.5, 8.0, 8.5],
        "colors": ["#8b0000", "#b22222", "#ff8c00", "#ffd700", "#adff2f", "#32cd32", "#00fa9a",
                   "#1e90ff", "#4169e1"],
    },
    "stoniness": {
        "unit": "% surface",
        "bins": [0, 5, 10, 15, 20, 25, 30],
        "colors": ["#008000", "#5fbf00", "#a3e200", "#ffd700", "#ff9900", "#ff6600", "#ff3300"],
    },
    "weeds": {
        "unit": "% density",
        "bins": [0, 10, 20, 40, 60, 80, 100],
        "colors": ["#006400", "#228b22", "#7fff00", "#ffd700", "#ffa500", "#ff4500", "#8b0000"],
    },
}

def legend_config() -> dict:
    """A deep copy of the legend table, safe to hand to serializers."""
    return copy.deepcopy(LEGENDS)

def _legend(layer: str) -> dict:
    try:
        return LEGENDS[layer]
    except KeyError:
        raise InvalidLayer(layer, LEGENDS.keys()) from None

def bin_index(layer: str, value: float) -> int:
    """
    Index of the highest bin whose threshold is <= value. Values below the
    lowest threshold fall back to the first bin.
    """
    bins = _legend(layer)["bins"]
    index = int(np.searchsorted(bins, value, side='right')) - 1
    return max(index, 0)

def color_for_value(layer: str, value: float) -> str:
    return _legend(layer)["colors"][bin_index(layer, value)]

def hex_to_rgb(color: str) -> tuple:
    color = color.lstrip('#')
    return tuple(int(color[i:i + 2], 16) for i in (0, 2, 4))

def create_layer_lut(layer: str) -> np.ndarray:
    """Creates a LUT where the index is the bin index and the value is the RGB color."""
    return np.array([hex_to_rgb(c) for c in _legend(layer)["colors"]], dtype=np.uint8)

def get_layer_color_array(values: np.ndarray, layer: str) -> np.ndarray:
    """
    Converts a (rows x cols) array of physical values into a
    (rows x cols x 3) RGB array using the layer's legend bins.
    """
    bins = np.asarray(_legend(layer)["bins"])
    indices = np.searchsorted(bins, values, side='right') - 1
    indices = np.clip(indices, 0, len(bins) - 1)
    return create_layer_lut(layer)[indices]
