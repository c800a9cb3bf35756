"""link_warden.check: запуск muffet и классификация его вывода."""

from .arguments import BROWSER_HEADERS, build_arguments
from .classify import broken_link_lines, count_broken_links
from .orchestrator import CheckOrchestrator, CheckResult, default_report_dir
from .runner import ProcessRunner, SubprocessRunner

__all__ = [
    "BROWSER_HEADERS",
    "CheckOrchestrator",
    "CheckResult",
    "ProcessRunner",
    "SubprocessRunner",
    "broken_link_lines",
    "build_arguments",
    "count_broken_links",
    "default_report_dir",
]
