from __future__ import annotations

from git_diff_export.domain.errors import FileTransferError
from git_diff_export.domain.models.file_change import ChangeStatus, FileChange
from git_diff_export.domain.models.transfer_outcome import TransferOutcome
from git_diff_export.domain.services.manifest import generate_error_report, generate_manifest


def test_generate_manifest_given_all_change_types_when_rendered_then_groups_in_fixed_order():
    changes = [
        FileChange(ChangeStatus.DELETED, "deleted.go"),
        FileChange(ChangeStatus.RENAMED, "renamed.go", old_path="oldname.go"),
        FileChange(ChangeStatus.MODIFIED, "modified.go"),
        FileChange(ChangeStatus.ADDED, "new.go"),
    ]

    text = generate_manifest(changes)

    assert text == (
        "new files:\n"
        "- new.go\n"
        "modified:\n"
        "- modified.go\n"
        "renamed:\n"
        "- renamed.go (previously oldname.go)\n"
        "deleted:\n"
        "- deleted.go"
    )


def test_generate_manifest_given_unsorted_entries_when_rendered_then_sorts_each_section():
    changes = [
        FileChange(ChangeStatus.ADDED, "b.go"),
        FileChange(ChangeStatus.ADDED, "a.go"),
        FileChange(ChangeStatus.ADDED, "C.go"),
    ]

    assert generate_manifest(changes) == "new files:\n- C.go\n- a.go\n- b.go"


def test_generate_manifest_given_only_new_files_when_rendered_then_omits_other_headers():
    text = generate_manifest([FileChange(ChangeStatus.ADDED, "a.go")])

    assert "modified:" not in text
    assert "renamed:" not in text
    assert "deleted:" not in text
    assert not text.endswith("\n")


def test_generate_manifest_given_copy_when_rendered_then_labels_it_in_renamed_section():
    changes = [
        FileChange(ChangeStatus.COPIED, "copy.go", old_path="orig.go"),
        FileChange(ChangeStatus.RENAMED, "new.go", old_path="old.go"),
    ]

    text = generate_manifest(changes)

    assert text == (
        "renamed:\n"
        "- copy.go (copied from orig.go)\n"
        "- new.go (previously old.go)"
    )


def test_generate_manifest_given_no_changes_when_rendered_then_empty():
    assert generate_manifest([]) == ""


def test_generate_manifest_given_unknown_status_when_rendered_then_left_out():
    changes = [FileChange(ChangeStatus.TYPE_CHANGED, "link"), FileChange(ChangeStatus.ADDED, "a")]

    assert generate_manifest(changes) == "new files:\n- a"


def test_generate_error_report_given_failures_when_rendered_then_one_line_each_in_order():
    outcome = TransferOutcome()
    outcome.record_failure("b.go", FileTransferError("b.go", "read content", OSError("boom")))
    outcome.record_success("ok.go")
    outcome.record_failure("a.go", FileTransferError("a.go", "write entry", OSError("disk full")))

    report = generate_error_report(outcome)

    assert report.split("\n") == [
        "b.go: read content: boom",
        "a.go: write entry: disk full",
    ]


def test_generate_error_report_given_no_failures_when_rendered_then_empty():
    assert generate_error_report(TransferOutcome()) == ""
