from __future__ import annotations

from git_diff_export.entrypoints.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
