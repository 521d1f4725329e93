# uiauto_wda/timings.py
"""
@file timings.py
@brief Timeout presets and defaults for element resolution.
"""

from __future__ import annotations
from copy import deepcopy
from typing import Any, Dict


# Seconds. Resolution polls without sleeping; the remote round trip paces it.
TIMEOUT_FIELDS: Dict[str, Dict[str, Any]] = {
    "find_element": {"timeout": 17.0},
    "find_optional_element": {"timeout": 7.0},
    "find_quick": {"timeout": 1.0},
    "element_gone": {"timeout": 17.0},
    "http_request": {"timeout": 60.0},
}

PRESET_OVERRIDES: Dict[str, Dict[str, Any]] = {
    "fast": {
        "find_element": {"timeout": 8.0},
        "find_optional_element": {"timeout": 3.0},
        "find_quick": {"timeout": 0.5},
        "element_gone": {"timeout": 8.0},
        "http_request": {"timeout": 30.0},
    },
    "slow": {
        "find_element": {"timeout": 30.0},
        "find_optional_element": {"timeout": 12.0},
        "find_quick": {"timeout": 2.0},
        "element_gone": {"timeout": 30.0},
    },
    "ci": {
        "find_element": {"timeout": 40.0},
        "find_optional_element": {"timeout": 15.0},
        "find_quick": {"timeout": 3.0},
        "element_gone": {"timeout": 40.0},
        "http_request": {"timeout": 90.0},
    },
}


def list_presets() -> Dict[str, Dict[str, Any]]:
    return {"default": {}, **PRESET_OVERRIDES}


def build_preset_values(preset: str) -> Dict[str, Any]:
    preset_key = (preset or "default").lower()
    values: Dict[str, Any] = deepcopy(TIMEOUT_FIELDS)

    if preset_key == "default":
        return values

    overrides = PRESET_OVERRIDES.get(preset_key)
    if overrides is None:
        raise ValueError(f"Unknown timing preset: {preset}")

    for key, value in overrides.items():
        base = deepcopy(values[key])
        base.update(value)
        values[key] = base

    return values
