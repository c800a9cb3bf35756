# File: link_warden/installer.py
"""link_warden.installer: загрузка и кэширование бинарника muffet по версии и платформе."""

from __future__ import annotations

import asyncio
import logging
import os
import platform
import stat
import tarfile
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from aiohttp import ClientError, ClientSession, ClientTimeout

from link_warden.check.runner import ProcessRunner, SubprocessRunner
from link_warden.logger import logger as default_logger
from link_warden.logger import section

__all__ = [
    "MUFFET_VERSION",
    "RELEASE_BASE_URL",
    "ToolAsset",
    "UnsupportedPlatformError",
    "InstallError",
    "resolve_asset",
    "default_cache_root",
    "install_muffet",
]

MUFFET_VERSION = "2.10.7"
RELEASE_BASE_URL = "https://github.com/raviqqe/muffet/releases/download"

_ARCH_ALIASES = {"x86_64": "x64", "amd64": "x64", "x64": "x64", "arm64": "arm64", "aarch64": "arm64"}


class UnsupportedPlatformError(RuntimeError):
    """No muffet release asset exists for this OS/architecture pair."""


class InstallError(RuntimeError):
    """Download, extraction or verification of muffet failed."""


@dataclass(frozen=True)
class ToolAsset:
    """Имя архива релиза и имя бинарника внутри него."""

    filename: str
    binary_name: str

    @property
    def is_zip(self) -> bool:
        return self.filename.endswith(".zip")

    def url(self, version: str, base_url: str = RELEASE_BASE_URL) -> str:
        return f"{base_url.rstrip('/')}/v{version}/{self.filename}"


def resolve_asset(system: Optional[str] = None, machine: Optional[str] = None) -> ToolAsset:
    """Подбирает архив релиза для платформы; иначе UnsupportedPlatformError."""
    system = (system or platform.system()).lower()
    raw_machine = machine or platform.machine()
    arch = _ARCH_ALIASES.get(raw_machine.lower(), raw_machine.lower())

    if system == "linux" and arch == "x64":
        return ToolAsset("muffet_linux_amd64.tar.gz", "muffet")
    if system == "darwin" and arch == "x64":
        return ToolAsset("muffet_darwin_amd64.tar.gz", "muffet")
    if system == "darwin" and arch == "arm64":
        return ToolAsset("muffet_darwin_arm64.tar.gz", "muffet")
    if system == "windows":
        return ToolAsset("muffet_windows_amd64.zip", "muffet.exe")
    raise UnsupportedPlatformError(f"Unsupported platform: {system}/{raw_machine}")


def default_cache_root() -> Path:
    """``$RUNNER_TOOL_CACHE`` на CI, иначе ``~/.cache/link-warden``."""
    tool_cache = os.environ.get("RUNNER_TOOL_CACHE")
    if tool_cache:
        return Path(tool_cache)
    return Path.home() / ".cache" / "link-warden"


def _extract_binary(archive: Path, asset: ToolAsset, target: Path) -> None:
    """Извлекает только сам бинарник, игнорируя структуру каталогов архива."""
    target.parent.mkdir(parents=True, exist_ok=True)
    if asset.is_zip:
        with zipfile.ZipFile(archive) as zf:
            names = [n for n in zf.namelist() if Path(n).name == asset.binary_name]
            if not names:
                raise InstallError(f"{asset.binary_name} not found in {asset.filename}")
            target.write_bytes(zf.read(names[0]))
        return

    with tarfile.open(archive, "r:gz") as tf:
        members = [m for m in tf.getmembers() if m.isfile() and Path(m.name).name == asset.binary_name]
        if not members:
            raise InstallError(f"{asset.binary_name} not found in {asset.filename}")
        src = tf.extractfile(members[0])
        if src is None:
            raise InstallError(f"cannot read {members[0].name} from {asset.filename}")
        with src:
            target.write_bytes(src.read())


async def _download(url: str, dest: Path, timeout: float) -> None:
    try:
        async with ClientSession(timeout=ClientTimeout(total=timeout)) as session:
            async with session.get(url) as resp:
                if resp.status != 200:
                    raise InstallError(f"Download of {url} failed: HTTP {resp.status}")
                with dest.open("wb") as f:
                    async for chunk in resp.content.iter_chunked(64 * 1024):
                        f.write(chunk)
    except asyncio.TimeoutError as exc:
        raise InstallError(f"Download of {url} timed out after {timeout:g}s") from exc
    except ClientError as exc:
        raise InstallError(f"Download of {url} failed: {exc}") from exc


async def _verify(binary: Path, runner: ProcessRunner, log: logging.Logger) -> str:
    chunks: List[bytes] = []
    try:
        code = await runner.run([str(binary), "--version"], lambda _name, chunk: chunks.append(chunk))
    except OSError as exc:
        raise InstallError(f"Cannot execute {binary}: {exc}") from exc
    version_text = b"".join(chunks).decode("utf-8", errors="replace").strip()
    if code != 0:
        raise InstallError(f"{binary} --version exited with code {code}")
    log.info("muffet %s", version_text)
    return version_text


async def install_muffet(
    version: str = MUFFET_VERSION,
    *,
    cache_root: Union[str, Path, None] = None,
    base_url: str = RELEASE_BASE_URL,
    system: Optional[str] = None,
    machine: Optional[str] = None,
    runner: Optional[ProcessRunner] = None,
    logger: Optional[logging.Logger] = None,
    download_timeout: float = 300.0,
) -> Path:
    """
    Возвращает путь к бинарнику muffet, скачивая его при отсутствии в кэше.

    Кэш раскладывается как ``<cache_root>/muffet/<version>/<system>_<arch>/`` (например ``linux_amd64``).
    Платформа проверяется до любого сетевого запроса.
    """
    log = logger or default_logger
    asset = resolve_asset(system, machine)
    root = Path(cache_root) if cache_root is not None else default_cache_root()
    platform_key = asset.filename.split("_", 1)[1].split(".", 1)[0]
    binary = root / "muffet" / version / platform_key / asset.binary_name

    with section("Installing muffet", log):
        fresh = not binary.is_file()
        if not fresh:
            log.info("Using cached muffet v%s: %s", version, binary)
        else:
            url = asset.url(version, base_url)
            log.info("Downloading muffet v%s...", version)
            log.debug("Download URL: %s", url)
            binary.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(suffix=Path(asset.filename).suffix, dir=binary.parent)
            os.close(fd)
            archive = Path(tmp_name)
            try:
                await _download(url, archive, download_timeout)
                _extract_binary(archive, asset, binary)
            except (tarfile.TarError, zipfile.BadZipFile) as exc:
                raise InstallError(f"Cannot extract {asset.filename}: {exc}") from exc
            finally:
                archive.unlink(missing_ok=True)

        if not asset.is_zip:
            mode = binary.stat().st_mode
            binary.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

        try:
            await _verify(binary, runner or SubprocessRunner(), log)
        except InstallError:
            # не оставляем в кэше бинарник, который не прошёл проверку
            if fresh:
                binary.unlink(missing_ok=True)
            raise

    return binary
