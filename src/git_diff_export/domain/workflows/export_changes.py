from __future__ import annotations

from typing import Callable, Protocol, Sequence

from git_diff_export.config.settings_models import ExportConfiguration
from git_diff_export.domain.errors import ExportError, InvalidRevisionError, PreflightError
from git_diff_export.domain.models.disposition import Classification
from git_diff_export.domain.models.export_result import ExportResult
from git_diff_export.domain.protocols.change_provider_port import ChangeProviderPort
from git_diff_export.domain.protocols.logger_port import LoggerPort
from git_diff_export.domain.protocols.sink_port import SinkPort
from git_diff_export.domain.services.decision_engine import DecisionEngine, FilterRules, export_set
from git_diff_export.domain.services.manifest import (
    ERRORS_ENTRY,
    SUMMARY_ENTRY,
    generate_error_report,
    generate_manifest,
)
from git_diff_export.domain.workflows.transfer_engine import (
    CancellationToken,
    ProgressCallback,
    TransferEngine,
)


class ReportExporterPort(Protocol):
    def export(
        self, config: ExportConfiguration, classifications: Sequence[Classification]
    ) -> object: ...


class ExportChanges:
    def __init__(
        self,
        provider: ChangeProviderPort,
        sink_factory: Callable[[ExportConfiguration], SinkPort],
        logger: LoggerPort,
        report_exporter: ReportExporterPort | None = None,
    ) -> None:
        self._provider = provider
        self._sink_factory = sink_factory
        self._logger = logger
        self._report_exporter = report_exporter

    def preflight(self, config: ExportConfiguration) -> None:
        if not self._provider.is_repository_present():
            raise PreflightError("not a git repository")
        if not self._provider.has_any_commit():
            raise PreflightError("repository has no commits")
        for label, revision in (("from-commit", config.from_ref), ("to-commit", config.to_ref)):
            try:
                self._provider.validate_revision(revision)
            except Exception as exc:
                raise InvalidRevisionError(label, revision, exc) from exc

    def classify(self, config: ExportConfiguration) -> list[Classification]:
        changes = self._provider.get_changed_files(config.from_ref, config.to_ref)
        engine = DecisionEngine(
            provider=self._provider,
            rules=FilterRules(
                include_patterns=config.include_patterns,
                ignore_patterns=config.ignore_patterns,
                max_size=config.max_size,
            ),
            to_ref=config.to_ref,
            logger=self._logger,
        )
        return engine.classify(changes)

    def __call__(
        self,
        config: ExportConfiguration,
        cancel_token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ExportResult:
        self.preflight(config)
        classifications = self.classify(config)
        files = export_set(classifications)

        if not classifications:
            self._logger.info("No changes between %s and %s", config.from_ref, config.to_ref)
        elif not files:
            self._logger.info("No files to export after filtering")

        if not files or config.preview:
            self._write_report(config, classifications)
            return ExportResult(tuple(classifications), None, None)

        sink = self._sink_factory(config)
        sink.prepare()
        try:
            engine = TransferEngine(
                provider=self._provider,
                to_ref=config.to_ref,
                logger=self._logger,
                workers=config.workers,
                queue_size=config.queue_size,
                verbose=config.verbose,
            )
            outcome = engine.transfer(
                files, sink, config.transfer_mode, cancel_token, on_progress
            )

            changes = [item.change for item in classifications]
            self._write_entry(sink, SUMMARY_ENTRY, generate_manifest(changes), "summary")
            if outcome.has_failures:
                self._write_entry(sink, ERRORS_ENTRY, generate_error_report(outcome), "error report")
        finally:
            sink.close()

        self._logger.info(
            "Export finished: destination: %s, exported: %d, failed: %d",
            sink.location,
            outcome.success_count,
            outcome.failed_count,
        )
        self._write_report(config, classifications)
        return ExportResult(tuple(classifications), outcome, sink.location)

    @staticmethod
    def _write_entry(sink: SinkPort, name: str, text: str, label: str) -> None:
        try:
            sink.write(name, text.encode("utf-8"))
        except Exception as exc:
            raise ExportError(f"failed to write {label}: {exc}") from exc

    def _write_report(
        self, config: ExportConfiguration, classifications: Sequence[Classification]
    ) -> None:
        if not config.json_report or self._report_exporter is None:
            return
        self._report_exporter.export(config, classifications)
