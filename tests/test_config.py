# tests/test_config.py
"""
Tests for timeout configuration and presets.
"""

import threading

import pytest

from uiauto_wda.config import TimeConfig, available_presets, configure_for_ci, configure_for_local_dev
from uiauto_wda.timings import build_preset_values


class TestPresets:
    """Tests for timing presets."""

    def test_defaults(self):
        """Should expose the default timeouts."""
        cfg = TimeConfig.current()
        assert cfg.find_element.timeout == 17.0
        assert cfg.find_optional_element.timeout == 7.0
        assert cfg.find_quick.timeout == 1.0
        assert cfg.http_request.timeout == 60.0

    def test_available(self):
        """Should list every preset."""
        assert set(available_presets()) == {"default", "fast", "slow", "ci"}

    def test_unknown_preset(self):
        """Should reject an unknown preset name."""
        with pytest.raises(ValueError):
            build_preset_values("turbo")

    def test_ci(self):
        """Should switch the run scope to the CI preset."""
        configure_for_ci()
        assert TimeConfig.current().find_element.timeout == 40.0

    def test_local_dev(self):
        """Should switch the run scope to the fast preset."""
        configure_for_local_dev()
        assert TimeConfig.current().find_element.timeout == 8.0
        assert TimeConfig.default().find_element.timeout == 17.0


class TestOverrides:
    """Tests for overrides and run config precedence."""

    def test_override_context(self):
        """Should apply overrides only inside the context."""
        with TimeConfig.override(find_element=3.0, find_quick={"timeout": 0.2}):
            assert TimeConfig.current().find_element.timeout == 3.0
            assert TimeConfig.current().find_quick.timeout == 0.2
        assert TimeConfig.current().find_element.timeout == 17.0

    def test_override_beats_run_config(self):
        """Should let a temporary override win over the run config."""
        TimeConfig.install_run_config(TimeConfig.build_from(preset="slow"))
        with TimeConfig.override(find_element=2.0):
            assert TimeConfig.current().find_element.timeout == 2.0
        assert TimeConfig.current().find_element.timeout == 30.0

    def test_clear_run_config(self):
        """Should fall back to the process default once the run config is cleared."""
        configure_for_ci()
        TimeConfig.clear_run_config()
        assert TimeConfig.current().find_element.timeout == 17.0

    def test_run_config_is_per_thread(self):
        """Should not leak a run config installed on one thread into another."""
        configure_for_ci()
        seen = {}

        def worker():
            seen["timeout"] = TimeConfig.current().find_element.timeout

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert seen["timeout"] == 17.0
        assert TimeConfig.current().find_element.timeout == 40.0

    def test_unknown_field(self):
        """Should reject overrides for unknown timeouts."""
        with pytest.raises(ValueError):
            with TimeConfig.override(resolve_window=1.0):
                pass

    def test_build_from_app_defaults(self):
        """Should take object map timeouts and ignore zero values."""
        cfg = TimeConfig.build_from(app_defaults={"find_timeout_ms": 9000, "optional_find_timeout_ms": 0})
        assert cfg.find_element.timeout == 9.0
        assert cfg.find_optional_element.timeout == 7.0

    def test_app_defaults_ignored_for_presets(self):
        """Should let an explicit preset win over object map timeouts."""
        cfg = TimeConfig.build_from(preset="fast", app_defaults={"find_timeout_ms": 9000})
        assert cfg.find_element.timeout == 8.0

    def test_clone_is_independent(self):
        """Should not share settings between a config and its clone."""
        cfg = TimeConfig.build_from(overrides={"element_gone": 5})
        clone = cfg.clone()
        clone.element_gone.timeout = 1.0
        assert cfg.element_gone.timeout == 5.0
