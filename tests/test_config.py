"""Tests for configuration loading."""

from __future__ import annotations

import json
import logging

from rlsight.core.config import (
    AnalysisConfig,
    LoggingConfig,
    RLSightConfig,
    dict_to_config,
    get_config,
    load_config,
    load_env_config,
    merge_configs,
    set_config,
    setup_logging,
)


class TestLoadConfig:
    """Defaults, files, environment and overrides."""

    def test_defaults(self):
        config = load_config()
        assert config.analysis == AnalysisConfig()
        assert config.analysis.height_bounds == (120.0, 250.0, 600.0)
        assert config.logging.level == "INFO"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("analysis:\n  zone_threshold: 1800\n  height_bounds: [100, 200, 500]\n")
        config = load_config(path)
        assert config.analysis.zone_threshold == 1800
        assert config.analysis.height_bounds == (100.0, 200.0, 500.0)

    def test_toml_file(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text("[analysis]\nkickoff_time_delay = 3\n")
        assert load_config(path).analysis.kickoff_time_delay == 3

    def test_default_location(self, tmp_path):
        (tmp_path / "rlsight.json").write_text(json.dumps({"logging": {"level": "DEBUG"}}))
        assert load_config().logging.level == "DEBUG"

    def test_env_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"analysis": {"zone_threshold": 1800}}))
        monkeypatch.setenv("RLSIGHT_ZONE_THRESHOLD", "1666.5")
        assert load_config(path).analysis.zone_threshold == 1666.5

    def test_overrides_beat_env(self, monkeypatch):
        monkeypatch.setenv("RLSIGHT_KICKOFF_DELAY", "3")
        config = load_config(overrides={"analysis": {"kickoff_time_delay": 4}})
        assert config.analysis.kickoff_time_delay == 4

    def test_env_types(self, monkeypatch):
        monkeypatch.setenv("RLSIGHT_OPENING_KICKOFF_SECOND", "-2")
        monkeypatch.setenv("RLSIGHT_LOG_LEVEL", "warning")
        env = load_env_config()
        assert env["analysis"]["opening_kickoff_second"] == -2
        assert env["logging"]["level"] == "warning"

    def test_unknown_analysis_key_is_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = dict_to_config({"analysis": {"bogus": 1}})
        assert not hasattr(config.analysis, "bogus")
        assert "bogus" in caplog.text

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "absent.yaml").analysis == AnalysisConfig()


class TestHelpers:
    """Merging, saving and the process default."""

    def test_merge_is_recursive(self):
        merged = merge_configs({"analysis": {"a": 1, "b": 2}}, {"analysis": {"b": 3}})
        assert merged == {"analysis": {"a": 1, "b": 3}}

    def test_set_config(self):
        custom = RLSightConfig(analysis=AnalysisConfig(boost_max=100))
        set_config(custom)
        assert get_config() is custom

    def test_setup_logging_with_file(self, tmp_path):
        root = logging.getLogger()
        before = list(root.handlers)
        level = root.level
        try:
            setup_logging(LoggingConfig(level="DEBUG", file=str(tmp_path / "rlsight.log")))
            added = [h for h in root.handlers if h not in before]
            assert len(added) == 2
            assert root.level == logging.DEBUG
        finally:
            for handler in root.handlers[:]:
                if handler not in before:
                    root.removeHandler(handler)
                    handler.close()
            root.setLevel(level)
