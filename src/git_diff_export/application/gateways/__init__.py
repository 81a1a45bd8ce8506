from git_diff_export.application.gateways.git_change_provider import (
    GitChangeProvider,
    parse_name_status,
)

__all__ = ["GitChangeProvider", "parse_name_status"]
