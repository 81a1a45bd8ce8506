from git_diff_export.application.adapters.sinks.sink_factory import build_sink
from git_diff_export.application.adapters.sinks.tar_sink import TarSink
from git_diff_export.application.adapters.sinks.tree_sink import TreeSink
from git_diff_export.application.adapters.sinks.zip_sink import ZipSink

__all__ = ["TarSink", "TreeSink", "ZipSink", "build_sink"]
