# uiauto_wda/repository.py
from __future__ import annotations
import json
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml
from jsonschema import Draft202012Validator

from .exceptions import ConfigError
from .selector import Selector


SCHEMA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "schemas", "object_map.schema.json")

_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def _substitute(value: Any, variables: Dict[str, Any]) -> Any:
    """Substitute ${NAME} placeholders in selector values; unknown names are left as is."""
    if isinstance(value, str):

        def repl(m):
            key = m.group(1)
            if key not in variables:
                return m.group(0)
            return str(variables[key])

        return _VAR_PATTERN.sub(repl, value)
    if isinstance(value, list):
        return [_substitute(v, variables) for v in value]
    if isinstance(value, dict):
        return {k: _substitute(v, variables) for k, v in value.items()}
    return value


@dataclass(frozen=True)
class AppConfig:
    find_timeout_ms: int = 0
    optional_find_timeout_ms: int = 0
    artifacts_dir: Optional[str] = None
    strict_selector_keys: bool = True


class Repository:
    """
    Loads an object map YAML: named selectors plus app-level resolution defaults.

        app:
          find_timeout_ms: 17000
          artifacts_dir: artifacts
        selectors:
          login_button: Login
          password_field:
            id: passwordField
            below: {text: Email}
    """

    def __init__(self, path: str):
        self.path = os.path.abspath(path)
        self._raw: Dict[str, Any] = self._load_yaml(self.path)
        self._validate_schema(self._raw)
        self._app = self._parse_app_config(self._raw.get("app", {}) or {})
        self._selectors: Dict[str, Any] = self._raw.get("selectors", {}) or {}
        self._validate()

    @staticmethod
    def _load_yaml(path: str) -> Dict[str, Any]:
        if not os.path.exists(path):
            raise ConfigError(f"Object map YAML not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Object map YAML must be a mapping at root.")
        return data

    @staticmethod
    def _validate_schema(data: Dict[str, Any]) -> None:
        with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
            schema = json.load(f)
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
        if errors:
            lines = ["Object map schema validation failed:"]
            for e in errors:
                lines.append(f"- {list(e.path)}: {e.message}")
            raise ConfigError("\n".join(lines))

    def _parse_app_config(self, d: Dict[str, Any]) -> AppConfig:
        artifacts_dir = d.get("artifacts_dir")
        if artifacts_dir and not os.path.isabs(artifacts_dir):
            artifacts_dir = os.path.join(os.path.dirname(self.path), artifacts_dir)
        return AppConfig(
            find_timeout_ms=int(d.get("find_timeout_ms", 0)),
            optional_find_timeout_ms=int(d.get("optional_find_timeout_ms", 0)),
            artifacts_dir=artifacts_dir,
            strict_selector_keys=bool(d.get("strict_selector_keys", True)),
        )

    def _validate(self) -> None:
        for name, spec in self._selectors.items():
            Selector.from_dict(spec, strict=self._app.strict_selector_keys, where=f"selectors.{name}")

    @property
    def app(self) -> AppConfig:
        return self._app

    def app_defaults(self) -> Dict[str, float]:
        """Timeouts in the shape TimeConfig.build_from expects."""
        return {
            "find_timeout_ms": float(self._app.find_timeout_ms),
            "optional_find_timeout_ms": float(self._app.optional_find_timeout_ms),
        }

    def get_selector(self, name: str, variables: Optional[Dict[str, Any]] = None) -> Selector:
        if name not in self._selectors:
            raise ConfigError(f"Unknown selector: {name}")
        spec = self._selectors[name]
        if variables:
            spec = _substitute(spec, variables)
        return Selector.from_dict(spec, strict=self._app.strict_selector_keys, where=f"selectors.{name}")

    def list_selectors(self) -> List[str]:
        return sorted(self._selectors.keys())
