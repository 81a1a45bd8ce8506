from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from git_diff_export.domain.models.transfer_mode import TransferMode
from git_diff_export.domain.services.path_validation import validate_destination_path


class SinkKind(StrEnum):
    PREVIEW = "preview"
    DIRECTORY = "directory"
    ZIP = "zip"
    TAR = "tar"
    TAR_GZ = "tar.gz"


_ARCHIVE_SUFFIXES: tuple[tuple[str, SinkKind], ...] = (
    (".zip", SinkKind.ZIP),
    (".tar.gz", SinkKind.TAR_GZ),
    (".tgz", SinkKind.TAR_GZ),
    (".tar", SinkKind.TAR),
)


def archive_kind_for(path: Path | str) -> SinkKind:
    lower = str(path).lower()
    for suffix, kind in _ARCHIVE_SUFFIXES:
        if lower.endswith(suffix):
            return kind
    raise ValueError("unsupported archive format: must be .zip, .tar, .tar.gz, or .tgz")


def split_patterns(values: object) -> tuple[str, ...]:
    if values is None:
        return tuple()
    if isinstance(values, str):
        values = [values]
    patterns: list[str] = []
    for value in values:  # type: ignore[union-attr]
        for part in str(value).split(","):
            trimmed = part.strip()
            if trimmed and trimmed not in patterns:
                patterns.append(trimmed)
    return tuple(patterns)


class ExportConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_ref: str
    to_ref: str = Field(default="HEAD")
    output_dir: Path | None = Field(default=None)
    archive_path: Path | None = Field(default=None)
    overwrite: bool = Field(default=False)
    concurrent: bool = Field(default=False)
    verbose: bool = Field(default=False)
    include_patterns: tuple[str, ...] = Field(default=())
    ignore_patterns: tuple[str, ...] = Field(default=())
    max_size: int = Field(default=0, ge=0)
    workers: int = Field(default=5, ge=1)
    queue_size: int = Field(default=20, ge=1)
    json_report: bool = Field(default=False)
    json_file: Path | None = Field(default=None)

    @field_validator("from_ref")
    @classmethod
    def _validate_from_ref(cls, value: str) -> str:
        normalized = str(value or "").strip()
        if not normalized:
            raise ValueError("from-revision is required")
        return normalized

    @field_validator("to_ref", mode="before")
    @classmethod
    def _default_to_ref(cls, value: object) -> str:
        normalized = str(value or "").strip()
        return normalized or "HEAD"

    @field_validator("include_patterns", "ignore_patterns", mode="before")
    @classmethod
    def _split_patterns(cls, value: object) -> tuple[str, ...]:
        return split_patterns(value)

    @field_validator("output_dir", "archive_path", "json_file", mode="before")
    @classmethod
    def _validate_path(cls, value: object) -> object:
        if value is None or value == "":
            return None
        return validate_destination_path(str(value))

    @model_validator(mode="after")
    def _validate_sink(self) -> "ExportConfiguration":
        if self.output_dir is not None and self.archive_path is not None:
            raise ValueError("cannot use both output directory and archive path")
        if self.archive_path is not None:
            archive_kind_for(self.archive_path)
        return self

    @property
    def preview(self) -> bool:
        return self.output_dir is None and self.archive_path is None

    @property
    def sink_kind(self) -> SinkKind:
        if self.archive_path is not None:
            return archive_kind_for(self.archive_path)
        if self.output_dir is not None:
            return SinkKind.DIRECTORY
        return SinkKind.PREVIEW

    @property
    def destination(self) -> Path | None:
        return self.archive_path if self.archive_path is not None else self.output_dir

    @property
    def transfer_mode(self) -> TransferMode:
        return TransferMode.PARALLEL if self.concurrent else TransferMode.SEQUENTIAL


class RuntimeSettings(BaseModel):
    log_level: str = Field(default="warning")
    log_file: Path | None = Field(default=None)
    workers: int | None = Field(default=None, ge=1)
    queue_size: int | None = Field(default=None, ge=1)

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = str(value or "").strip().lower()
        if normalized not in {"debug", "info", "warn", "warning", "error"}:
            raise ValueError("GIT_DE_LOG_LEVEL must be one of: debug, info, warn, error")
        return "warning" if normalized == "warn" else normalized
