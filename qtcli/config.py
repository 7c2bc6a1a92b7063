"""qtcli configuration.

Typed settings for template discovery and preset persistence.  Settings use
a Pydantic v2 model so they are validated at construction time and can be
built from environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

_PACKAGE_TEMPLATES_DIR = Path(__file__).parent / "templates"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _default_preset_file() -> Path:
    return Path.home() / ".qtcli.preset"


class Settings(BaseModel):
    """Global qtcli configuration.

    Instances are created once by the command layer and handed to the
    template library, the preset store and the generator.
    """

    templates_dir: Path = Field(
        default=_PACKAGE_TEMPLATES_DIR,
        description="Root of the built-in template asset tree",
    )
    preset_file: Path = Field(
        default_factory=_default_preset_file,
        description="YAML file holding the user presets",
    )
    template_file_name: str = Field(default="templates.yml")
    prompt_file_name: str = Field(default="prompt.yml")
    file_types_dir: str = Field(
        default="types",
        description="Directory under the asset root with one template per file extension",
    )
    log_level: str = Field(default="WARNING")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level: {value!r}")
        return level

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def file_types_path(self) -> Path:
        """Absolute path of the per-extension template directory."""
        return self.templates_dir / self.file_types_dir

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            QTCLI_TEMPLATES_DIR, QTCLI_PRESET_FILE, QTCLI_LOG_LEVEL.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("QTCLI_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["QTCLI_TEMPLATES_DIR"])
        if os.environ.get("QTCLI_PRESET_FILE"):
            kwargs["preset_file"] = Path(os.environ["QTCLI_PRESET_FILE"]).expanduser()
        if os.environ.get("QTCLI_LOG_LEVEL"):
            kwargs["log_level"] = os.environ["QTCLI_LOG_LEVEL"]
        return cls(**kwargs)
