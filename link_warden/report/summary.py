"""link_warden.report.summary: Markdown-сводка результата проверки с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Union

from jinja2 import Environment, PackageLoader

_TEMPLATE_NAME = "summary.md.j2"


def _environment() -> Environment:
    # Markdown, не HTML: экранирование отключено
    return Environment(
        loader=PackageLoader("link_warden", "report/templates"),
        autoescape=False,
    )


def render_summary(verdict: Any, url: str) -> str:
    """Рендерит Markdown-сводку для вердикта *verdict* и проверяемого *url*."""
    template = _environment().get_template(_TEMPLATE_NAME)
    return template.render(verdict=verdict, url=url)


def write_summary(verdict: Any, url: str, output_path: Union[Path, str]) -> Path:
    """Дописывает сводку в файл (так устроен файл сводки шага CI) и возвращает путь.

    Пример:
    ```python
    from link_warden.report.summary import write_summary
    write_summary(verdict, "https://example.com", os.environ["GITHUB_STEP_SUMMARY"])
    ```
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("a", encoding="utf-8") as f:
        f.write(render_summary(verdict, url))
        f.write("\n")
    return output_path
