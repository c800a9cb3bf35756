# link_warden/check/arguments.py
"""
Translation of :class:`CheckConfig` into muffet's command-line arguments.
"""
from __future__ import annotations

from typing import List, Tuple

from link_warden.config import CheckConfig

__all__ = ("BROWSER_HEADERS", "build_arguments")

# Some servers reject clients that do not look like a browser.
BROWSER_HEADERS: Tuple[Tuple[str, str], ...] = (
    (
        "User-Agent",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    ),
    (
        "Accept",
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8",
    ),
    ("Accept-Language", "en-US,en;q=0.9"),
    ("Cache-Control", "no-cache"),
)


def build_arguments(config: CheckConfig) -> List[str]:
    """
    Build the argument list for one muffet run; the target URL is always last.

    Colored output is always disabled so the combined output stays parseable.
    """
    args = [
        f"--timeout={config.timeout}",
        f"--max-connections={config.max_connections}",
        f"--max-connections-per-host={config.max_connections_per_host}",
        f"--buffer-size={config.buffer_size}",
        f"--max-redirections={config.max_redirects}",
        "--color=never",
    ]

    for pattern in config.exclude_patterns:
        if pattern.strip():
            args.append(f"--exclude={pattern.strip()}")

    if config.include_browser_headers:
        args.extend(f"--header={name}:{value}" for name, value in BROWSER_HEADERS)

    if config.skip_tls_verify:
        args.append("--skip-tls-verification")

    if config.verbose:
        args.append("--verbose")

    args.append(config.target_url)
    return args
