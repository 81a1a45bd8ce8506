from git_diff_export.domain.models.disposition import Classification, Disposition
from git_diff_export.domain.models.export_result import ExportResult
from git_diff_export.domain.models.file_change import ChangeStatus, FileChange
from git_diff_export.domain.models.progress import ProgressEvent
from git_diff_export.domain.models.transfer_mode import TransferMode
from git_diff_export.domain.models.transfer_outcome import TransferFailure, TransferOutcome

__all__ = [
    "ChangeStatus",
    "Classification",
    "Disposition",
    "ExportResult",
    "FileChange",
    "ProgressEvent",
    "TransferFailure",
    "TransferMode",
    "TransferOutcome",
]
