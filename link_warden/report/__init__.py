"""link_warden.report: отчёты о результате проверки (JSON и Markdown-сводка)."""

from .json_report import render_json, verdict_to_dict
from .summary import render_summary, write_summary

__all__ = ["render_json", "verdict_to_dict", "render_summary", "write_summary"]
