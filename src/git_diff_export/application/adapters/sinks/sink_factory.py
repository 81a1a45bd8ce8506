from __future__ import annotations

from git_diff_export.config.settings_models import ExportConfiguration, SinkKind
from git_diff_export.domain.protocols.sink_port import SinkPort
from git_diff_export.application.adapters.sinks.tar_sink import TarSink
from git_diff_export.application.adapters.sinks.tree_sink import TreeSink
from git_diff_export.application.adapters.sinks.zip_sink import ZipSink


def build_sink(config: ExportConfiguration) -> SinkPort:
    kind = config.sink_kind
    if kind is SinkKind.DIRECTORY and config.output_dir is not None:
        return TreeSink(config.output_dir, overwrite=config.overwrite)
    if config.archive_path is not None:
        if kind is SinkKind.ZIP:
            return ZipSink(config.archive_path)
        if kind in (SinkKind.TAR, SinkKind.TAR_GZ):
            return TarSink(config.archive_path, compressed=kind is SinkKind.TAR_GZ)
    raise ValueError(f"no sink for destination kind: {kind.value}")
