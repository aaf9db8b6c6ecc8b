from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from analytics_dashboard.filters import ALL_POST_TYPES, MetricMode

DASHBOARD_TABS = ("content", "engagement", "timing", "wordcloud", "website")


class BackendConfig(BaseModel):
    base_url: str = "http://localhost:8080"
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class DashboardConfig(BaseModel):
    default_tab: str = "content"
    default_mode: MetricMode = MetricMode.likes
    post_types: list[str] = Field(default_factory=lambda: list(ALL_POST_TYPES))

    @field_validator("default_tab")
    @classmethod
    def _known_tab(cls, value: str) -> str:
        if value not in DASHBOARD_TABS:
            raise ValueError(f"default_tab must be one of {', '.join(DASHBOARD_TABS)}")
        return value

    @field_validator("post_types")
    @classmethod
    def _known_post_types(cls, value: list[str]) -> list[str]:
        unknown = sorted(set(value) - set(ALL_POST_TYPES))
        if unknown:
            raise ValueError(f"Unknown post types: {', '.join(unknown)}")
        if not value:
            raise ValueError("post_types must not be empty")
        return value


class WordCloudConfig(BaseModel):
    container_width: int = Field(default=960, ge=0)
    container_height: int = Field(default=420, ge=0)


class VelocityConfig(BaseModel):
    top_n: int = Field(default=7, ge=1)


class PagesConfig(BaseModel):
    top_n: int = Field(default=15, ge=1)


class OutputsConfig(BaseModel):
    payload_file: str = "dashboard.json"
    html_file: str = "dashboard.html"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    backend: BackendConfig = Field(default_factory=BackendConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    wordcloud: WordCloudConfig = Field(default_factory=WordCloudConfig)
    velocity: VelocityConfig = Field(default_factory=VelocityConfig)
    pages: PagesConfig = Field(default_factory=PagesConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    env_base_url = os.getenv("ANALYTICS_DASHBOARD_BASE_URL")
    if env_base_url:
        config.backend.base_url = env_base_url.rstrip("/")
    return config
