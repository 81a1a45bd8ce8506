from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from git_diff_export.config.settings_models import ExportConfiguration, RuntimeSettings
from git_diff_export.domain.services.size_format import parse_size


def _env(environ: Mapping[str, str], name: str, default, type_):
    v = environ.get(name)
    if v is None:
        return default

    v = v.strip()

    if type_ is int:
        if v == "":
            return default
        try:
            return int(v)
        except ValueError:
            raise ValueError(f"{name} must be an integer, got {v!r}") from None

    if type_ is str:
        return default if v == "" else v

    raise TypeError(f"Unsupported type {type_}")


@dataclass(frozen=True)
class AppConfig:
    export: ExportConfiguration
    runtime: RuntimeSettings


class SettingsLoader:
    @staticmethod
    def load_runtime(environ: Mapping[str, str] | None = None) -> RuntimeSettings:
        env = os.environ if environ is None else environ
        return RuntimeSettings(
            log_level=_env(env, "GIT_DE_LOG_LEVEL", "warning", str),
            log_file=_env(env, "GIT_DE_LOG_FILE", None, str),
            workers=_env(env, "GIT_DE_WORKERS", None, int),
            queue_size=_env(env, "GIT_DE_QUEUE_SIZE", None, int),
        )

    @classmethod
    def load(
        cls,
        values: Mapping[str, Any],
        environ: Mapping[str, str] | None = None,
    ) -> AppConfig:
        runtime = cls.load_runtime(environ)

        data = {key: value for key, value in values.items() if value is not None}
        max_size = data.pop("max_size", None)
        if isinstance(max_size, str):
            try:
                data["max_size"] = parse_size(max_size)
            except ValueError as exc:
                raise ValueError(f"invalid max-size: {exc}") from None
        elif max_size is not None:
            data["max_size"] = max_size

        if runtime.workers is not None:
            data.setdefault("workers", runtime.workers)
        if runtime.queue_size is not None:
            data.setdefault("queue_size", runtime.queue_size)

        if data.get("verbose") and runtime.log_level == "warning":
            runtime = runtime.model_copy(update={"log_level": "info"})

        return AppConfig(export=ExportConfiguration(**data), runtime=runtime)
