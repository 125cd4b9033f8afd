# farm_simulator/fields.py

"""
================================================================================
FIELD PARTITIONING
================================================================================
This module carves the bounding box into irregular "fields" (paddocks) using a
Voronoi diagram of random points, and aggregates per-layer statistics for
each field from the grid cells whose centroid falls inside it.

Data Contract:
---------------
- Inputs:
    - The Grid, the per-layer physical matrices, a NoiseSource and the
      field settings (point count, minimum area).
- Outputs:
    - A list of Field records with sequential ids starting at 1.
- Side Effects: Consumes values from the given NoiseSource.
- Invariants: No returned field has an area below the minimum. Averages are
  None exactly when no cell centroid lies strictly inside the field.
================================================================================
"""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType

import numpy as np
import shapely
from pyproj import Geod
from shapely.geometry import MultiPoint, Polygon
from shapely.ops import voronoi_diagram

from . import config as DEFAULTS
from .grid import BoundingBox, Grid
from .noise import NoiseSource

_GEOD = Geod(ellps=DEFAULTS.AREA_ELLIPSOID)

@dataclass(frozen=True)
class Field:
    id: int
    polygon: Polygon
    area_m2: float
    averages: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))
    cell_count: int = 0

def scatter_points(bbox: BoundingBox, count: int, source: NoiseSource) -> np.ndarray:
    """Draws `count` uniform points inside the box, x then y for each point."""
    draws = source.take(2 * count).reshape(count, 2)
    xs = bbox.min_x + draws[:, 0] * bbox.width
    ys = bbox.min_y + draws[:, 1] * bbox.height
    return np.column_stack((xs, ys))

def clipped_voronoi(points: np.ndarray, bbox: BoundingBox) -> list:
    """
    Computes the Voronoi regions of the points, clipped to the box. Clipping
    can produce empty or multi-part geometries along the boundary; only plain
    polygons are kept.
    """
    if len(points) == 0:
        return []
    envelope = bbox.to_polygon()
    regions = voronoi_diagram(MultiPoint([tuple(p) for p in points]), envelope=envelope)

    polygons = []
    for region in regions.geoms:
        clipped = region.intersection(envelope)
        if clipped.is_empty or clipped.geom_type != "Polygon":
            continue
        polygons.append(clipped)
    return polygons

def geodesic_area_m2(polygon: Polygon) -> float:
    """Area on the WGS84 ellipsoid, in square meters, for a lng/lat polygon."""
    area, _ = _GEOD.geometry_area_perimeter(polygon)
    return abs(area)

def summarize_polygon(polygon: Polygon, grid: Grid, layers: dict) -> tuple:
    """
    Averages every layer over the grid cells whose centroid lies inside the
    polygon. Centroids on the boundary do not count, so a cell is attributed
    to at most one field.

    Returns:
        tuple: (averages, count) where averages maps layer name to the mean,
            or to None when no centroid is inside.
    """
    inside = shapely.contains_xy(polygon, grid.centroids_x, grid.centroids_y)
    count = int(np.count_nonzero(inside))
    averages = {}
    for name, matrix in layers.items():
        if count:
            averages[name] = float(matrix.flat()[inside].sum() / count)
        else:
            averages[name] = None
    return averages, count

def partition_fields(
    grid: Grid,
    layers: dict,
    source: NoiseSource,
    field_count: int = DEFAULTS.DEFAULT_FIELD_COUNT,
    min_area_m2: float = DEFAULTS.MIN_FIELD_AREA_M2,
    logger: logging.Logger = None,
) -> list:
    """
    Builds the field collection: scatter points, tessellate, drop slivers,
    number the survivors and aggregate their statistics.
    """
    logger = logger or logging.getLogger(__name__)
    for name, matrix in layers.items():
        if matrix.shape != (grid.rows, grid.cols):
            raise ValueError(
                f"Layer '{name}' has shape {matrix.shape}, grid is {grid.rows}x{grid.cols}"
            )

    points = scatter_points(grid.bbox, field_count, source)
    regions = clipped_voronoi(points, grid.bbox)
    logger.debug(f"Voronoi produced {len(regions)} polygons from {field_count} points.")

    fields = []
    for polygon in regions:
        area = geodesic_area_m2(polygon)
        if area < min_area_m2:
            logger.debug(f"Discarding sliver of {area:.0f} m² (minimum {min_area_m2:.0f} m²).")
            continue
        averages, count = summarize_polygon(polygon, grid, layers)
        fields.append(Field(id=len(fields) + 1, polygon=polygon, area_m2=area,
                            averages=MappingProxyType(averages), cell_count=count))

    logger.info(f"Partitioned {len(fields)} fields ({len(regions) - len(fields)} slivers discarded).")
    return fields
