"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, knadmin.toml only contains
overrides. A standalone install usually needs only ``[cluster] manifest_dir``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class ClusterConfig(BaseModel):
    """[cluster] section."""

    model_config = {"frozen": True}

    installation_method: str = "standalone"
    manifest_dir: Path | None = None
    namespace: str = "knative-serving"
    config_name: str = "config-domain"
    conflict_retries: int = Field(default=3, ge=0)

