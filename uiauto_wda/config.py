# uiauto_wda/config.py
"""
@file config.py
@brief Centralized timeout configuration for element resolution.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Generator, Optional

from .timings import TIMEOUT_FIELDS, build_preset_values, list_presets


@dataclass
class TimeoutSettings:
    """Timeout setting for a specific operation type."""
    timeout: float

    def with_overrides(self, timeout: Optional[float] = None) -> TimeoutSettings:
        """Create a new settings instance with overrides applied."""
        return TimeoutSettings(timeout=timeout if timeout is not None else self.timeout)


class TimeConfig:
    """
    Timeout configuration for the framework.

    Deterministic precedence is applied per run via build/install APIs:
      base defaults -> preset -> overrides -> object map app defaults
    """

    _default_instance: Optional[TimeConfig] = None
    _default_preset: str = "default"
    _local = threading.local()
    _lock = threading.Lock()

    find_element: TimeoutSettings
    find_optional_element: TimeoutSettings
    find_quick: TimeoutSettings
    element_gone: TimeoutSettings
    http_request: TimeoutSettings

    def __init__(self, preset: Optional[str] = None):
        preset_name = preset or self._default_preset
        self._apply_values(build_preset_values(preset_name))

    @classmethod
    def _timeout_fields(cls) -> Dict[str, Dict[str, Any]]:
        return TIMEOUT_FIELDS

    def _apply_values(self, values: Dict[str, Any]) -> None:
        for name in self._timeout_fields():
            val = values.get(name)
            if isinstance(val, TimeoutSettings):
                setting = deepcopy(val)
            elif isinstance(val, dict):
                setting = TimeoutSettings(timeout=float(val["timeout"]))
            else:
                raise ValueError(f"Invalid timeout setting for {name}: {val}")
            setattr(self, name, setting)

    def to_dict(self) -> Dict[str, Any]:
        return {name: {"timeout": getattr(self, name).timeout} for name in self._timeout_fields()}

    def clone(self) -> TimeConfig:
        """Return a deep clone of this config."""
        clone = TimeConfig()
        clone._apply_values(self.to_dict())
        return clone

    @classmethod
    def build_from(
        cls,
        *,
        preset: str = "default",
        overrides: Optional[Dict[str, Any]] = None,
        app_defaults: Optional[Dict[str, float]] = None,
    ) -> TimeConfig:
        """
        Build a deterministic run-scope config snapshot.

        app_defaults takes find_timeout_ms / optional_find_timeout_ms from
        an object map and only applies on the default preset.
        """
        cfg = cls(preset)
        if overrides:
            _apply_overrides(cfg, overrides)
        if app_defaults and preset == "default":
            app_overrides: Dict[str, Any] = {}
            if app_defaults.get("find_timeout_ms"):
                app_overrides["find_element"] = {"timeout": float(app_defaults["find_timeout_ms"]) / 1000.0}
            if app_defaults.get("optional_find_timeout_ms"):
                app_overrides["find_optional_element"] = {
                    "timeout": float(app_defaults["optional_find_timeout_ms"]) / 1000.0
                }
            _apply_overrides(cfg, app_overrides)
        return cfg

    @classmethod
    def default(cls) -> TimeConfig:
        """Get the process default configuration (singleton)."""
        if cls._default_instance is None:
            with cls._lock:
                if cls._default_instance is None:
                    cls._default_instance = cls(cls._default_preset)
        return cls._default_instance

    @classmethod
    def install_run_config(cls, config: TimeConfig) -> None:
        """Install per-thread run configuration snapshot."""
        cls._local.run_config = config

    @classmethod
    def clear_run_config(cls) -> None:
        """Clear per-thread run configuration snapshot."""
        cls._local.run_config = None

    @classmethod
    def current(cls) -> TimeConfig:
        """Get the current effective configuration."""
        override = getattr(cls._local, "override", None)
        if override is not None:
            return override

        run_cfg = getattr(cls._local, "run_config", None)
        if run_cfg is not None:
            return run_cfg

        return cls.default()

    @classmethod
    def apply_preset(cls, preset: str) -> None:
        """Apply a preset to the current run-scope config."""
        base = cls.current().clone()
        base._apply_values(build_preset_values(preset))
        cls.install_run_config(base)

    @classmethod
    @contextmanager
    def override(cls, **kwargs: Any) -> Generator[TimeConfig, None, None]:
        """Context manager for temporary configuration overrides."""
        previous = getattr(cls._local, "override", None)
        new_config = cls.current().clone()
        _apply_overrides(new_config, kwargs)

        cls._local.override = new_config
        try:
            yield new_config
        finally:
            cls._local.override = previous

    @classmethod
    def reset_to_defaults(cls) -> None:
        """Reset default and clear all thread-local config state."""
        with cls._lock:
            cls._default_preset = "default"
            cls._default_instance = cls(cls._default_preset)
        cls._local.override = None
        cls._local.run_config = None


def _apply_overrides(config: TimeConfig, overrides: Dict[str, Any]) -> None:
    for key, value in overrides.items():
        if key not in config._timeout_fields():
            raise ValueError(f"Unknown TimeConfig field: {key}")
        base_setting: TimeoutSettings = getattr(config, key)
        if isinstance(value, TimeoutSettings):
            setattr(config, key, deepcopy(value))
        elif isinstance(value, dict):
            setattr(config, key, base_setting.with_overrides(timeout=value.get("timeout")))
        elif isinstance(value, (int, float)):
            setattr(config, key, base_setting.with_overrides(timeout=float(value)))
        else:
            raise ValueError(f"Invalid override for {key}: {value}")


def configure_for_ci() -> None:
    """Configure timeouts for CI environments (run scope)."""
    TimeConfig.apply_preset("ci")


def configure_for_local_dev() -> None:
    """Configure timeouts for local development (run scope)."""
    TimeConfig.apply_preset("fast")


def available_presets() -> Dict[str, Dict[str, Any]]:
    return list_presets()
