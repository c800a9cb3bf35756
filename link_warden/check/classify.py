# link_warden/check/classify.py
"""
Broken-link classification of muffet's combined output.

muffet prints every page with broken links as a line that starts with the
page URL; nothing else in its report is parsed. Replace this module if the
tool's output format changes.
"""
from __future__ import annotations

import re
from typing import List

__all__ = ("BROKEN_LINK_LINE", "broken_link_lines", "count_broken_links")

BROKEN_LINK_LINE = re.compile(r"^https?://")


def broken_link_lines(output: str) -> List[str]:
    """Return the lines of *output* that start with ``http://`` or ``https://``."""
    return [line for line in output.split("\n") if BROKEN_LINK_LINE.match(line)]


def count_broken_links(output: str) -> int:
    return len(broken_link_lines(output))
