# farm_simulator/simulation.py

"""
================================================================================
CORE FARM SIMULATION ENGINE
================================================================================
This module contains the main FarmSimulation class, responsible for generating
the whole synthetic precision-farming dataset once and answering queries
against it.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): A dictionary of simulation parameters which can override
      the internal defaults. Expected keys include 'bbox', 'grid_rows',
      'layer_seeds', 'field_count', etc.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - JSON-ready dicts (GeoJSON FeatureCollections for geometry).
- Side Effects: Logs messages using the provided logger. probe(save=True)
  appends to the sample log; nothing else changes after initialization.
- Invariants: Given the same configuration, every layer and every field is
  identical across runs.
================================================================================
"""

import logging
import math
import time

from . import config as DEFAULTS
from .errors import InvalidLayer
from .fields import partition_fields
from .grid import BoundingBox, Grid
from .legends import legend_config
from .noise import NoiseSource
from .payloads import parse_probe_request
from .query import PointQueryEngine
from .samples import SampleStore
from .surfaces import synthesize_surface, to_physical_units

def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

def format_layer_value(layer: str, value):
    """Acidity keeps two decimals; the other layers are whole numbers."""
    if value is None:
        return None
    if layer == "acidity":
        return round(float(value), 2)
    return _round_half_up(value)

def _feature(geometry: dict, properties: dict) -> dict:
    return {"type": "Feature", "geometry": geometry, "properties": properties}

def _feature_collection(features: list) -> dict:
    return {"type": "FeatureCollection", "features": features}

class FarmSimulation:
    """
    Generates and serves the simulated farm dataset: layer surfaces, the cell
    grid, the field polygons and the probe sample log.
    """
    def __init__(self, config: dict = None, logger: logging.Logger = None):
        """
        Initializes the simulation and runs the full generation pipeline.

        Args:
            config (dict, optional): User-defined parameters to override defaults.
            logger (logging.Logger, optional): The logger instance for all output.
        """
        self.logger = logger or logging.getLogger(__name__)
        self.user_config = config or {}
        self.logger.info("FarmSimulation initializing...")

        # --- Consolidate Configuration ---
        bbox_overridden = 'bbox' in self.user_config
        self.settings = {
            'bbox': list(self.user_config.get('bbox', DEFAULTS.DEFAULT_BBOX)),
            'zoom': self.user_config.get('zoom', DEFAULTS.DEFAULT_ZOOM),
            'grid_rows': self.user_config.get('grid_rows', DEFAULTS.DEFAULT_GRID_ROWS),
            'grid_cols': self.user_config.get('grid_cols', DEFAULTS.DEFAULT_GRID_COLS),
            'layer_seeds': {**DEFAULTS.DEFAULT_LAYER_SEEDS, **self.user_config.get('layer_seeds', {})},
            'coarse_lattice_shape': tuple(self.user_config.get('coarse_lattice_shape', DEFAULTS.COARSE_LATTICE_SHAPE)),
            'fine_lattice_shape': tuple(self.user_config.get('fine_lattice_shape', DEFAULTS.FINE_LATTICE_SHAPE)),
            'coarse_weight': self.user_config.get('coarse_weight', DEFAULTS.COARSE_WEIGHT),
            'fine_weight': self.user_config.get('fine_weight', DEFAULTS.FINE_WEIGHT),
            'trend_strength': self.user_config.get('trend_strength', DEFAULTS.TREND_STRENGTH),
            'field_count': self.user_config.get('field_count', DEFAULTS.DEFAULT_FIELD_COUNT),
            'field_seed': self.user_config.get('field_seed', DEFAULTS.DEFAULT_FIELD_SEED),
            'min_field_area_m2': self.user_config.get('min_field_area_m2', DEFAULTS.MIN_FIELD_AREA_M2),
        }

        # --- Public Properties for easy access ---
        self.bbox = BoundingBox.from_sequence(self.settings['bbox'])
        if 'center' in self.user_config:
            self.center = dict(self.user_config['center'])
        elif bbox_overridden:
            center_x, center_y = self.bbox.center
            self.center = {"lat": center_y, "lng": center_x}
        else:
            self.center = dict(DEFAULTS.DEFAULT_CENTER)
        self.settings['center'] = self.center
        self.zoom = self.settings['zoom']
        self.rows = self.settings['grid_rows']
        self.cols = self.settings['grid_cols']

        start_time = time.perf_counter()

        # --- 1. Grid Tessellation ---
        self.cell_grid = Grid(self.bbox, self.rows, self.cols)
        self.logger.info(
            f"Grid: {self.rows}x{self.cols} cells over {self.bbox.as_list()} "
            f"(cell {self.cell_grid.dx:.5f} x {self.cell_grid.dy:.5f} deg)"
        )

        # --- 2. Layer Surfaces ---
        self.normalized_layers = {}
        self.layers = {}
        for layer in DEFAULTS.LAYER_NAMES:
            seed = self.settings['layer_seeds'][layer]
            normalized = synthesize_surface(self.rows, self.cols, seed, self.settings)
            self.normalized_layers[layer] = normalized
            self.layers[layer] = to_physical_units(layer, normalized)
            self.logger.debug(
                f"Layer '{layer}' (seed {seed}): {self.layers[layer].min()} .. {self.layers[layer].max()}"
            )
        self._check_layer_ranges()

        # --- 3. Fields ---
        self._fields = tuple(partition_fields(
            self.cell_grid,
            self.layers,
            NoiseSource(self.settings['field_seed']),
            field_count=self.settings['field_count'],
            min_area_m2=self.settings['min_field_area_m2'],
            logger=self.logger,
        ))

        # --- 4. Query & Sample Log ---
        self.query_engine = PointQueryEngine(self.cell_grid, self.layers)
        self.sample_store = SampleStore()

        elapsed = time.perf_counter() - start_time
        self.logger.info(f"FarmSimulation ready: {len(self._fields)} fields, generated in {elapsed:.2f} seconds.")

    def _check_layer_ranges(self):
        for layer, matrix in self.layers.items():
            low, high = DEFAULTS.LAYER_RANGES[layer]
            if matrix.min() < low or matrix.max() > high:
                raise RuntimeError(
                    f"Layer '{layer}' left its range [{low}, {high}]: "
                    f"{matrix.min()} .. {matrix.max()}"
                )

    def _require_layer(self, layer: str):
        if layer not in self.layers:
            raise InvalidLayer(layer, DEFAULTS.LAYER_NAMES)

    @property
    def field_records(self) -> tuple:
        """The generated Field objects, in id order."""
        return self._fields

    # --- External Interface ---

    def meta(self) -> dict:
        return {
            "boundingBox": self.bbox.as_list(),
            "center": dict(self.center),
            "zoom": self.zoom,
            "fieldCount": len(self._fields),
            "legends": legend_config(),
        }

    def fields(self) -> dict:
        features = []
        for field in self._fields:
            properties = {"id": field.id, "area_m2": _round_half_up(field.area_m2)}
            for layer in DEFAULTS.LAYER_NAMES:
                properties[f"avg_{layer}"] = format_layer_value(layer, field.averages[layer])
            features.append(_feature(field.polygon.__geo_interface__, properties))
        return _feature_collection(features)

    def grid(self, layer: str) -> dict:
        """All grid cells as polygons carrying the layer's value."""
        self._require_layer(layer)
        values = self.layers[layer]
        features = []
        for cell in self.cell_grid:
            value = format_layer_value(layer, values[cell.row, cell.col])
            features.append(_feature(
                self.cell_grid.geometry(cell.row, cell.col),
                {"r": cell.row, "c": cell.col, "value": value},
            ))
        return _feature_collection(features)

    def samples(self) -> dict:
        features = []
        for sample in self.sample_store.snapshot():
            properties = dict(sample.values)
            properties["ts"] = sample.ts
            features.append(_feature({"type": "Point", "coordinates": [sample.x, sample.y]}, properties))
        return _feature_collection(features)

    def probe(self, coordinate: tuple, save: bool = True) -> dict:
        """
        Reads all four layers at a (lng, lat) coordinate and optionally logs
        the result as a sample.
        """
        x, y = coordinate
        raw = self.query_engine.values_at(x, y)
        values = {layer: format_layer_value(layer, raw[layer]) for layer in DEFAULTS.LAYER_NAMES}
        if save:
            self.sample_store.append((x, y), values)
        return {"location": {"lat": y, "lng": x}, **values, "saved": bool(save)}

    def handle_probe_request(self, payload) -> dict:
        """Validates a raw probe request body, then probes."""
        coordinate, save = parse_probe_request(payload)
        return self.probe(coordinate, save=save)
