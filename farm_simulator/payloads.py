# farm_simulator/payloads.py

"""Validation of probe request bodies before they reach the engine."""

import math
import numbers

from .errors import InvalidCoordinate

def _coordinate(payload: dict, key: str) -> float:
    value = payload.get(key)
    # bool is an int subclass but never a coordinate.
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidCoordinate("lat and lng required")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidCoordinate(f"{key} must be finite, got {value}")
    return value

def parse_probe_request(payload) -> tuple:
    """
    Extracts ((lng, lat), save) from a probe request body such as
    {"lat": -34.61, "lng": -71.01, "save": false}.

    `save` defaults to True; only an explicit False turns saving off.
    """
    if not isinstance(payload, dict):
        raise InvalidCoordinate("lat and lng required")
    lat = _coordinate(payload, "lat")
    lng = _coordinate(payload, "lng")
    save = payload.get("save") is not False
    return (lng, lat), save
