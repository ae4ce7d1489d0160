"""Dispatcher settings and their YAML loader.

Example settings file::

    input_format: bedrock
    output_format: plain
    tools:
      - file_read
      - file_find
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from toolrpc.errors import ConfigError
from toolrpc.transform import FormatConfig, WireFormat, parse_format


class DispatcherSettings(BaseModel):
    """Declarative dispatcher configuration."""

    model_config = {"extra": "forbid"}

    input_format: WireFormat = Field(default=WireFormat.PLAIN, description="Convention of incoming params.")
    output_format: WireFormat = Field(default=WireFormat.PLAIN, description="Convention of results and error data.")
    tools: list[str] | None = Field(
        default=None,
        description="Built-in tool names to register; all of them when omitted.",
    )

    @field_validator("input_format", "output_format", mode="before")
    @classmethod
    def _accept_aliases(cls, value: Any) -> Any:
        return parse_format(value) if isinstance(value, str) else value

    def format_config(self) -> FormatConfig:
        return FormatConfig(input_format=self.input_format, output_format=self.output_format)


class SettingsLoader:
    """Load and validate a settings YAML file into :class:`DispatcherSettings`."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def load(self) -> DispatcherSettings:
        """Read YAML, interpolate env vars, and validate.

        ``$VAR`` and ``${VAR}`` references are expanded with
        :func:`os.path.expandvars` before parsing. An empty file yields the
        default settings.

        Raises:
            ConfigError: On read errors, YAML parse errors or validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Settings YAML must be a mapping")

        try:
            return DispatcherSettings.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc
