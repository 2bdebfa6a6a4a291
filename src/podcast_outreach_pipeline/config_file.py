"""Typed parsing and validation for ranking config files.

Example file:
    schema_version = 1

    [ranking]
    published_after_days = 30
    top = 5
    use_mock = true
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .exceptions import ConfigFileNotFoundError, ConfigFileParseError, ConfigFileValidationError

_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class RankingConfigFile:
    """Validated ranking values loaded from a TOML file."""

    published_after_days: int | None = None
    top: int | None = None
    use_mock: bool | None = None
    api_base_url: str | None = None
    recent_title_count: int | None = None


class _RankingSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    published_after_days: int | None = None
    top: int | None = None
    use_mock: bool | None = None
    api_base_url: str | None = None
    recent_title_count: int | None = None

    @field_validator("published_after_days")
    @classmethod
    def _validate_non_negative_int(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 0:
            raise ValueError
        return value

    @field_validator("top", "recent_title_count")
    @classmethod
    def _validate_positive_int(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 1:
            raise ValueError
        return value

    @field_validator("api_base_url")
    @classmethod
    def _validate_absolute_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not is_absolute_url(text):
            raise ValueError
        return text


class _ConfigFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    ranking: _RankingSectionModel

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value


def is_absolute_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",)))
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def load_ranking_config_file(path: Path) -> RankingConfigFile:
    """Load and validate a ranking TOML config file."""
    if not path.exists():
        raise ConfigFileNotFoundError(str(path))

    try:
        payload: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileParseError(str(path), str(exc)) from exc

    try:
        model = _ConfigFileModel.model_validate(payload)
    except ValidationError as exc:
        raise ConfigFileValidationError(str(path), _format_validation_error(exc)) from exc

    section = model.ranking
    return RankingConfigFile(
        published_after_days=section.published_after_days,
        top=section.top,
        use_mock=section.use_mock,
        api_base_url=section.api_base_url,
        recent_title_count=section.recent_title_count,
    )
