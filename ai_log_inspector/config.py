"""Runtime settings for indexing and search."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, EnvSettingsSource, SettingsConfigDict

from .errors import ConfigurationError

ENV_PREFIX = "LOG_INSPECTOR_"


class InspectorSettings(BaseSettings):
    """Tunable knobs shared by the indexer, retriever and tools.

    Every field can be set through a ``LOG_INSPECTOR_<FIELD>`` environment
    variable; the string ``none`` clears optional fields.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_parse_none_str="none",
        env_ignore_empty=True,
        extra="ignore",
    )

    embedding_model: str = "text-embedding-3-small"
    generation_model: str = "gpt-4o-mini"
    relevance_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    max_results: int = Field(default=10, ge=1)
    chunk_size: int = Field(default=500, ge=1)
    chunk_overlap: int = Field(default=100, ge=0)
    strict_indexing: bool = False
    provider_timeout: Optional[float] = Field(default=30.0, gt=0)
    keyword_scan_limit: int = Field(default=1000, ge=1)
    embedding_batch_size: int = Field(default=64, ge=1)
    store_dir: Optional[Path] = None

    @model_validator(mode="after")
    def _check_chunking(self) -> "InspectorSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than chunk_size ({self.chunk_size})"
            )
        return self


def load_settings(path: str | Path | None = None, **overrides: Any) -> InspectorSettings:
    """Merge a JSON file, ``LOG_INSPECTOR_*`` variables and explicit overrides.

    Later layers win; overrides whose value is ``None`` are ignored.
    """

    data: Dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        data.update(json.loads(config_path.read_text(encoding="utf-8")))

    try:
        # Init kwargs outrank the environment, so the env layer is read
        # explicitly to sit between the file and the overrides.
        data.update(EnvSettingsSource(InspectorSettings)())
        data.update({key: value for key, value in overrides.items() if value is not None})
        return InspectorSettings(**data)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
