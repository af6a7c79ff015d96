"""
Pipeline configuration.

Configuration is a Pydantic model so it can be built from keyword
arguments, environment variables (``BYLINE_*``) or a YAML file.

Example:
    >>> config = PipelineConfig(separator=";", field_pattern=r",\\s*")
    >>> config.separator
    b';'
"""

from __future__ import annotations

import codecs
import os
import re
from enum import Enum
from pathlib import Path
from typing import Any

import pydantic
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from byline.errors import ValidationError

DEFAULT_SEPARATOR = b"\n"
DEFAULT_FIELD_PATTERN = r"\s+"
DEFAULT_CHUNK_SIZE = 64 * 1024

ENV_PREFIX = "BYLINE_"


class OverflowPolicy(str, Enum):
    """What a pull does when a record is larger than the caller's buffer."""

    CARRY = "carry"
    """Keep the remainder and hand it out on the following pulls"""

    ERROR = "error"
    """Raise BufferTooSmallError and keep the record pending"""

    TRUNCATE = "truncate"
    """Drop the bytes that do not fit"""


def normalize_separator(value: Any) -> bytes:
    """Turn a separator given as bytes, str or int into one byte.

    Raises:
        ValidationError: If the value does not denote exactly one byte
    """
    if isinstance(value, bool):
        raise ValidationError(
            "Separator must be a single byte",
            field="separator",
            expected="bytes of length 1",
            actual=value,
        )
    if isinstance(value, int):
        if not 0 <= value <= 255:
            raise ValidationError(
                "Separator byte value out of range",
                field="separator",
                expected="0..255",
                actual=value,
            )
        return bytes([value])
    if isinstance(value, str):
        try:
            value = value.encode("latin-1")
        except UnicodeEncodeError:
            raise ValidationError(
                "Separator must be a single-byte character",
                field="separator",
                expected="character in U+0000..U+00FF",
                actual=value,
            ) from None
    if isinstance(value, (bytes, bytearray, memoryview)):
        value = bytes(value)
        if len(value) == 1:
            return value
    raise ValidationError(
        "Separator must be a single byte",
        field="separator",
        expected="bytes of length 1",
        actual=value,
    )


def compile_field_pattern(pattern: str | re.Pattern[str]) -> re.Pattern[str]:
    """Compile a field separator pattern.

    Raises:
        ValidationError: If the pattern is not a valid text regular expression
    """
    if isinstance(pattern, re.Pattern):
        if not isinstance(pattern.pattern, str):
            raise ValidationError(
                "Field pattern must match text, not bytes",
                field="field_pattern",
                expected="re.Pattern[str]",
                actual=pattern.pattern,
            )
        return pattern
    if not isinstance(pattern, str):
        raise ValidationError(
            "Field pattern must be a string or compiled pattern",
            field="field_pattern",
            expected="str",
            actual=type(pattern).__name__,
        )
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ValidationError(
            f"Invalid field pattern: {exc}",
            field="field_pattern",
            actual=pattern,
        ) from exc


class PipelineConfig(BaseModel):
    """Settings for one line pipeline."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    name: str = Field(default="pipeline", description="Name used in log output")
    separator: bytes = Field(
        default=DEFAULT_SEPARATOR, description="Record separator, a single byte"
    )
    field_pattern: re.Pattern[str] = Field(
        default_factory=lambda: re.compile(DEFAULT_FIELD_PATTERN),
        description="Regular expression splitting records into fields",
    )
    encoding: str = Field(default="utf-8", description="Text encoding for string filters")
    errors: str = Field(
        default="surrogateescape", description="Codec error handler for string filters"
    )
    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE, gt=0, description="Bytes requested per source read"
    )
    max_record_size: int | None = Field(
        default=None, gt=0, description="Largest unterminated record allowed"
    )
    overflow: OverflowPolicy = Field(
        default=OverflowPolicy.CARRY, description="Behavior for records larger than the read buffer"
    )

    @field_validator("separator", mode="before")
    @classmethod
    def _check_separator(cls, value: Any) -> bytes:
        return normalize_separator(value)

    @field_validator("field_pattern", mode="before")
    @classmethod
    def _check_field_pattern(cls, value: Any) -> re.Pattern[str]:
        return compile_field_pattern(value)

    @field_validator("encoding")
    @classmethod
    def _check_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError:
            raise ValidationError(
                f"Unknown encoding: {value}", field="encoding", actual=value
            ) from None
        return value

    @field_validator("errors")
    @classmethod
    def _check_errors(cls, value: str) -> str:
        try:
            codecs.lookup_error(value)
        except LookupError:
            raise ValidationError(
                f"Unknown codec error handler: {value}", field="errors", actual=value
            ) from None
        return value

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> PipelineConfig:
        """Validate a plain mapping, reporting failures as ValidationError."""
        try:
            return cls.model_validate(data)
        except pydantic.ValidationError as exc:
            first = exc.errors()[0]
            loc = ".".join(str(part) for part in first.get("loc", ()))
            raise ValidationError(
                f"Invalid pipeline configuration: {first.get('msg')}",
                field=loc or None,
                actual=first.get("input"),
            ) from exc

    @classmethod
    def from_env(
        cls, prefix: str = ENV_PREFIX, environ: dict[str, str] | None = None
    ) -> PipelineConfig:
        """Build a configuration from environment variables.

        Each field maps to ``{prefix}{FIELD_NAME}``, e.g. ``BYLINE_SEPARATOR``.
        Backslash escapes are honored in the separator, so ``\\t`` is a tab.

        Args:
            prefix: Environment variable prefix
            environ: Mapping to read instead of ``os.environ``

        Returns:
            PipelineConfig with defaults for unset variables
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = env.get(f"{prefix}{name.upper()}")
            if raw is None or raw == "":
                continue
            if name == "separator":
                raw = codecs.decode(raw, "unicode_escape")
            data[name] = raw
        return cls.from_mapping(data)


def load_config(path: str | Path) -> PipelineConfig:
    """Load a pipeline configuration from a YAML file.

    The file holds a mapping of PipelineConfig fields; a top-level
    ``pipeline`` key may wrap them.

    Args:
        path: Path to the YAML file

    Returns:
        Validated PipelineConfig

    Raises:
        ValidationError: If the file does not hold a valid configuration
    """
    path = Path(path)
    content = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise ValidationError(
            f"Invalid YAML in {path}: {exc}", field=str(path)
        ) from exc

    if isinstance(data, dict) and isinstance(data.get("pipeline"), dict):
        data = data["pipeline"]
    if not isinstance(data, dict):
        raise ValidationError(
            f"Configuration in {path} must be a mapping",
            field=str(path),
            expected="mapping",
            actual=type(data).__name__,
        )
    return PipelineConfig.from_mapping(data)
