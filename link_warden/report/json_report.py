# link_warden/report/json_report.py

"""
Генерация JSON-отчёта для LinkWarden.

Сериализация вердикта проверки в файл.
"""
import json
from pathlib import Path
from typing import Any, Dict


def verdict_to_dict(verdict: Any) -> Dict[str, Any]:
    """Поля вердикта, пригодные для JSON (без полного вывода muffet)."""
    return {
        "success": verdict.success,
        "broken_links_count": verdict.broken_links_count,
        "report_path": verdict.report_path,
        "failed": verdict.failed,
        "message": verdict.message,
    }


def render_json(verdict: Any, output_path: Path | str) -> Path:
    """
    Сохраняет вердикт в формате JSON по указанному пути.

    :param verdict: объект Verdict из link_warden.engine
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from link_warden.report.json_report import render_json
    report_path = render_json(verdict, 'reports/verdict.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(verdict_to_dict(verdict), f, ensure_ascii=False, indent=2)

    return output
