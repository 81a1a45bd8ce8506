from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

from git_diff_export.application.adapters.reports.json_report_exporter import JsonReportExporter
from git_diff_export.application.adapters.sinks.sink_factory import build_sink
from git_diff_export.application.gateways.git_change_provider import GitChangeProvider
from git_diff_export.config.settings_loader import AppConfig
from git_diff_export.domain.protocols.change_provider_port import ChangeProviderPort
from git_diff_export.domain.workflows.export_changes import ExportChanges


class Container:
    def __init__(
        self,
        config: AppConfig,
        work_dir: Path | None = None,
        provider: ChangeProviderPort | None = None,
        report_stream: TextIO | None = None,
    ) -> None:
        self.config = config
        self.logger = logging.getLogger("git_diff_export")
        self.provider: ChangeProviderPort = provider or GitChangeProvider(work_dir=work_dir)
        self.report_exporter = JsonReportExporter(stream=report_stream)

    def build_export_use_case(self) -> ExportChanges:
        return ExportChanges(
            provider=self.provider,
            sink_factory=build_sink,
            logger=self.logger,
            report_exporter=self.report_exporter,
        )
