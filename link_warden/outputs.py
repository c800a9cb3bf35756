"""link_warden.outputs: запись выходных значений шага (success, broken-links-count, report-path)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional, Union

from link_warden.logger import logger as default_logger

__all__ = ["write_outputs"]


def write_outputs(
    values: Mapping[str, str],
    path: Union[str, Path, None] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> Optional[Path]:
    """Логирует значения и, если задан *path*, дописывает их строками ``key=value``."""
    log = logger or default_logger
    for key, value in values.items():
        if "\n" in value:
            raise ValueError(f"output {key!r} must be a single line")
        log.info("output %s=%s", key, value)

    if path is None:
        return None
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("a", encoding="utf-8") as f:
        for key, value in values.items():
            f.write(f"{key}={value}\n")
    return out
