import json
import math

import pytest

from farm_simulator import FarmSimulation, InvalidCoordinate, InvalidLayer
from farm_simulator import config as DEFAULTS


def test_meta(simulation):
    meta = simulation.meta()
    assert meta["boundingBox"] == list(DEFAULTS.DEFAULT_BBOX)
    assert meta["center"] == DEFAULTS.DEFAULT_CENTER
    assert meta["zoom"] == 14
    assert meta["fieldCount"] == len(simulation.fields()["features"])
    assert set(meta["legends"]) == set(DEFAULTS.LAYER_NAMES)
    json.dumps(meta)


def test_overridden_bbox_centers_on_box(toy_simulation):
    assert toy_simulation.meta()["center"] == pytest.approx({"lat": 0.001, "lng": 0.001})


def test_identical_config_is_deterministic(simulation):
    other = FarmSimulation()
    for layer in DEFAULTS.LAYER_NAMES:
        assert other.normalized_layers[layer] == simulation.normalized_layers[layer]
        assert other.layers[layer] == simulation.layers[layer]
    assert other.fields() == simulation.fields()


@pytest.mark.parametrize("layer", DEFAULTS.LAYER_NAMES)
def test_grid_layer_output(simulation, layer):
    grid = simulation.grid(layer)
    features = grid["features"]
    assert grid["type"] == "FeatureCollection"
    assert len(features) == 40 * 50
    low, high = DEFAULTS.LAYER_RANGES[layer]
    for feature in features:
        value = feature["properties"]["value"]
        assert low <= value <= high
        if layer == "acidity":
            assert value == round(value, 2)
        else:
            assert isinstance(value, int)
    first = features[0]
    assert (first["properties"]["r"], first["properties"]["c"]) == (0, 0)
    assert first["geometry"]["type"] == "Polygon"


def test_grid_golden_two_by_two(toy_simulation):
    def values(layer):
        return [f["properties"]["value"] for f in toy_simulation.grid(layer)["features"]]

    assert values("nitrogen") == [64, 66, 89, 129]
    assert values("stoniness") == [6, 6, 9, 14]
    assert values("weeds") == [23, 24, 34, 51]
    assert values("acidity") == [5.57, 5.6, 5.99, 6.65]


def test_unknown_layer_rejected_without_side_effects(small_simulation):
    before = small_simulation.samples()
    with pytest.raises(InvalidLayer) as excinfo:
        small_simulation.grid("bogus")
    assert excinfo.value.layer == "bogus"
    assert small_simulation.samples() == before
    # Short aliases are not layer names.
    with pytest.raises(InvalidLayer):
        small_simulation.grid("ph")


def test_fields_output(simulation):
    collection = simulation.fields()
    assert collection["type"] == "FeatureCollection"
    ids = [f["properties"]["id"] for f in collection["features"]]
    assert ids == list(range(1, len(ids) + 1))
    for feature in collection["features"]:
        props = feature["properties"]
        assert feature["geometry"]["type"] == "Polygon"
        assert props["area_m2"] >= DEFAULTS.MIN_FIELD_AREA_M2
        for layer in DEFAULTS.LAYER_NAMES:
            assert f"avg_{layer}" in props
        if props["avg_nitrogen"] is not None:
            assert 0 <= props["avg_nitrogen"] <= 240
            assert 4.5 <= props["avg_acidity"] <= 8.5
    json.dumps(collection)


def test_toy_box_fields_respect_minimum_area(toy_simulation):
    # The toy box is only about 220 m on a side, so slivers are common.
    for feature in toy_simulation.fields()["features"]:
        assert feature["properties"]["area_m2"] >= DEFAULTS.MIN_FIELD_AREA_M2


def test_probe_at_every_centroid_matches_matrices(small_simulation):
    grid = small_simulation.cell_grid
    for cell in grid:
        result = small_simulation.probe(cell.centroid, save=False)
        raw = small_simulation.query_engine.values_at(*cell.centroid)
        for layer in DEFAULTS.LAYER_NAMES:
            assert raw[layer] == small_simulation.layers[layer][cell.row, cell.col]
        assert result["nitrogen"] == small_simulation.layers["nitrogen"][cell.row, cell.col]
        assert result["acidity"] == round(small_simulation.layers["acidity"][cell.row, cell.col], 2)
    assert small_simulation.samples()["features"] == []


def test_probe_far_outside_box_clamps_to_edge_cell(small_simulation):
    bbox = small_simulation.bbox
    corner = small_simulation.cell_grid.cell(small_simulation.rows - 1, 0).centroid
    far = (bbox.min_x - 50.0, bbox.max_y + 50.0)
    far_result = small_simulation.probe(far, save=False)
    corner_result = small_simulation.probe(corner, save=False)
    for layer in DEFAULTS.LAYER_NAMES:
        assert far_result[layer] == corner_result[layer]


def test_huge_or_infinite_coordinates_read_edge_cells(small_simulation):
    grid = small_simulation.cell_grid
    south_east = small_simulation.probe(grid.cell(0, grid.cols - 1).centroid, save=False)
    north_west = small_simulation.probe(grid.cell(grid.rows - 1, 0).centroid, save=False)
    east_cell = grid.cell(grid.rows // 2, grid.cols - 1)
    east_middle = small_simulation.probe(east_cell.centroid, save=False)

    huge = small_simulation.probe((1e308, -1e308), save=False)
    requested = small_simulation.handle_probe_request({"lat": 1e308, "lng": -1e308, "save": False})
    infinite = small_simulation.probe((math.inf, east_cell.centroid[1]), save=False)
    for layer in DEFAULTS.LAYER_NAMES:
        assert huge[layer] == south_east[layer]
        assert requested[layer] == north_west[layer]
        assert infinite[layer] == east_middle[layer]
    assert small_simulation.samples()["features"] == []


def test_probe_and_save_appends_one_sample(small_simulation):
    lng, lat = small_simulation.bbox.center
    before = len(small_simulation.samples()["features"])
    result = small_simulation.probe((lng, lat), save=True)
    features = small_simulation.samples()["features"]
    assert len(features) == before + 1
    assert result["saved"] is True
    assert result["location"] == {"lat": lat, "lng": lng}

    last = features[-1]
    assert last["geometry"] == {"type": "Point", "coordinates": [lng, lat]}
    for layer in DEFAULTS.LAYER_NAMES:
        assert last["properties"][layer] == result[layer]
    assert isinstance(last["properties"]["ts"], int)


def test_probe_without_save_leaves_log_alone(small_simulation):
    result = small_simulation.probe(small_simulation.bbox.center, save=False)
    assert result["saved"] is False
    assert small_simulation.samples()["features"] == []


def test_saved_sample_values_cannot_be_edited(small_simulation):
    small_simulation.probe(small_simulation.bbox.center, save=True)
    before = small_simulation.samples()
    sample = small_simulation.sample_store.snapshot()[0]
    with pytest.raises(TypeError):
        sample.values["nitrogen"] = -1
    assert small_simulation.samples() == before


def test_fields_without_enclosed_centroids_report_null_averages():
    simulation = FarmSimulation({"grid_rows": 2, "grid_cols": 2, "field_count": 60, "min_field_area_m2": 1.0})
    features = simulation.fields()["features"]
    empty = [
        f["properties"] for f in features
        if all(f["properties"][f"avg_{layer}"] is None for layer in DEFAULTS.LAYER_NAMES)
    ]
    assert empty
    assert all(props["area_m2"] > 0 for props in empty)
    assert len(features) - len(empty) <= 4
    json.dumps(simulation.fields())


def test_handle_probe_request(small_simulation):
    result = small_simulation.handle_probe_request({"lat": -34.61, "lng": -71.01, "save": False})
    assert result["location"] == {"lat": -34.61, "lng": -71.01}
    assert result["saved"] is False

    with pytest.raises(InvalidCoordinate):
        small_simulation.handle_probe_request({"lat": "x", "lng": -71.01})
    assert small_simulation.samples()["features"] == []


def test_field_seed_changes_fields_not_layers():
    a = FarmSimulation({"grid_rows": 8, "grid_cols": 10, "field_seed": 1})
    b = FarmSimulation({"grid_rows": 8, "grid_cols": 10, "field_seed": 2})
    assert a.layers["weeds"] == b.layers["weeds"]
    assert a.fields() != b.fields()
