from git_diff_export.application.adapters.reports.json_report_exporter import JsonReportExporter

__all__ = ["JsonReportExporter"]
