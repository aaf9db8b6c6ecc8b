from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from analytics_dashboard.config import AppConfig, load_config
from analytics_dashboard.filters import MetricMode


def test_load_config_reads_yaml_sections(tmp_path: Path) -> None:
    config_data = {
        "backend": {"base_url": "https://analytics.example/", "timeout_seconds": 5},
        "dashboard": {"default_tab": "timing", "default_mode": "views", "post_types": ["image"]},
        "velocity": {"top_n": 3},
    }
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(config_data), encoding="utf-8")

    cfg = load_config(config_path)

    assert cfg.backend.base_url == "https://analytics.example"
    assert cfg.backend.timeout_seconds == 5
    assert cfg.dashboard.default_tab == "timing"
    assert cfg.dashboard.default_mode == MetricMode.views
    assert cfg.dashboard.post_types == ["image"]
    assert cfg.velocity.top_n == 3
    assert cfg.pages.top_n == 15


def test_load_config_empty_file_uses_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("", encoding="utf-8")

    cfg = load_config(config_path)

    assert cfg.dashboard.default_tab == "content"
    assert cfg.wordcloud.container_width == 960
    assert cfg.outputs.payload_file == "dashboard.json"


def test_load_config_uses_env_base_url(monkeypatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("backend:\n  base_url: http://localhost:8080\n", encoding="utf-8")
    monkeypatch.setenv("ANALYTICS_DASHBOARD_BASE_URL", "https://override.example/")

    cfg = load_config(config_path)

    assert cfg.backend.base_url == "https://override.example"


def test_shipped_default_config_is_valid() -> None:
    config_path = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"

    cfg = load_config(config_path)

    assert cfg.dashboard.default_mode == MetricMode.likes
    assert "tag" in cfg.dashboard.post_types


def test_config_rejects_unknown_sections() -> None:
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"detectors": {}})


def test_config_rejects_unknown_tab_and_post_type() -> None:
    with pytest.raises(ValidationError, match="default_tab"):
        AppConfig.model_validate({"dashboard": {"default_tab": "settings"}})
    with pytest.raises(ValidationError, match="Unknown post types"):
        AppConfig.model_validate({"dashboard": {"post_types": ["image", "gif"]}})
