"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``KNADMIN_*`` prefix
  3. TOML file    — ``knadmin.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from knadmin.config.discovery import find_config
from knadmin.config.models import ClusterConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``knadmin.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class KnAdminSettings(BaseSettings):
    """Unified settings for the knadmin CLI.

    Stored on the :class:`~knadmin.commands._context.AppContext` created
    by the root CLI group.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
        config_root: Directory relative ``manifest_dir`` values resolve
            against (parent of ``config_path``, or CWD).
    """

    model_config = {
        "frozen": True,
        "env_prefix": "KNADMIN_",
        "env_nested_delimiter": "__",
    }

    config_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)

    @model_validator(mode="after")
    def _anchor_manifest_dir(self) -> KnAdminSettings:
        manifest_dir = self.cluster.manifest_dir
        if manifest_dir is not None and not manifest_dir.is_absolute():
            cluster = self.cluster.model_copy(
                update={"manifest_dir": self.config_root / manifest_dir}
            )
            object.__setattr__(self, "cluster", cluster)
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        config_root: Path | None = None,
        **cli_flags: Any,
    ) -> KnAdminSettings:
        """Construct settings from CLI invocation.

        Discovers ``knadmin.toml`` via walk-up (or explicit *config_path*)
        and merges CLI flags as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(config_root)

        resolved_root = config_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                config_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None
