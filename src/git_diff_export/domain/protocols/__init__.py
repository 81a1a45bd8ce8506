from git_diff_export.domain.protocols.change_provider_port import ChangeProviderPort
from git_diff_export.domain.protocols.logger_port import LoggerPort
from git_diff_export.domain.protocols.sink_port import SinkPort

__all__ = ["ChangeProviderPort", "LoggerPort", "SinkPort"]
