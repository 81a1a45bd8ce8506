from __future__ import annotations


class ExportError(Exception):
    """Base class for errors that abort an export run."""


class PreflightError(ExportError):
    pass


class InvalidRevisionError(PreflightError):
    def __init__(self, label: str, revision: str, cause: BaseException | None = None) -> None:
        self.label = label
        self.revision = revision
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"invalid {label}: {revision!r}{detail}")


class SinkPreparationError(ExportError):
    pass


class ChangeProviderError(ExportError):
    pass


class FileTransferError(Exception):
    """Wraps the failure of a single file; recorded, never raised past the engine."""

    def __init__(self, path: str, step: str, cause: BaseException) -> None:
        self.path = path
        self.step = step
        self.cause = cause
        super().__init__(f"{step}: {cause}")
