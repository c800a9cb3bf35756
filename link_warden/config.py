"""
Загрузка и валидация настроек LinkWarden.

Настройки приходят из YAML/JSON файла, переменных окружения и опций CLI;
Pydantic описывает схему и проверяет данные. Из общих настроек строятся
две неизменяемые конфигурации: ожидание готовности URL и запуск проверки.
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Annotated, Any, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import urlparse

import yaml
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

__all__ = [
    "ReadinessConfig",
    "CheckConfig",
    "ActionSettings",
    "load_config",
    "read_config_file",
    "split_patterns",
]


def split_patterns(value: Any) -> Tuple[str, ...]:
    """Newline-separated string or sequence → trimmed, non-empty entries in order."""
    if value is None:
        return ()
    items = value.split("\n") if isinstance(value, str) else list(value)
    return tuple(item.strip() for item in items if isinstance(item, str) and item.strip())


def _check_http_url(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    value = value.strip()
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"ожидается http(s) URL, получено {value!r}")
    return value


HttpUrlStr = Annotated[str, BeforeValidator(_check_http_url)]


class ReadinessConfig(BaseModel):
    """Параметры ожидания готовности целевого URL."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    target_url: HttpUrlStr = Field(..., description="URL, готовность которого ожидаем.")
    require_reachable: bool = Field(False, description="Ждать ответа HTTP 200.")
    content_pattern: Optional[str] = Field(None, description="Регулярное выражение для тела ответа.")
    timeout: float = Field(300.0, gt=0, description="Общий дедлайн ожидания (секунд).")
    interval: float = Field(5.0, gt=0, description="Пауза между попытками (секунд).")
    skip_tls_verify: bool = Field(False, description="Не проверять TLS-сертификат.")

    @field_validator("content_pattern", mode="before")
    def _empty_pattern_is_none(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and v == ""):
            return None
        return v

    @field_validator("content_pattern")
    def _pattern_compiles(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            try:
                re.compile(v)
            except re.error as exc:
                raise ValueError(f"некорректное регулярное выражение {v!r}: {exc}") from exc
        return v

    @model_validator(mode="before")
    @classmethod
    def _content_implies_reachable(cls, data: Any) -> Any:
        # a content check is only meaningful against a reachable URL
        if isinstance(data, dict) and data.get("content_pattern"):
            data = {**data, "require_reachable": True}
        return data

    @property
    def enabled(self) -> bool:
        return self.require_reachable

    @property
    def compiled_pattern(self) -> Optional[re.Pattern[str]]:
        return re.compile(self.content_pattern) if self.content_pattern is not None else None


class CheckConfig(BaseModel):
    """Параметры запуска внешнего проверяльщика ссылок."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    target_url: HttpUrlStr = Field(..., description="Корневой URL для проверки.")
    timeout: int = Field(30, gt=0, description="Таймаут одного запроса (секунд).")
    max_connections: int = Field(10, gt=0)
    max_connections_per_host: int = Field(5, gt=0)
    buffer_size: int = Field(16384, gt=0)
    max_redirects: int = Field(10, gt=0)
    exclude_patterns: Tuple[str, ...] = Field(default_factory=tuple)
    include_browser_headers: bool = True
    skip_tls_verify: bool = False
    verbose: bool = False

    @field_validator("exclude_patterns", mode="before")
    def _normalize_patterns(cls, v: Any) -> Tuple[str, ...]:
        return split_patterns(v)


def _hyphenate(name: str) -> str:
    return name.replace("_", "-")


class ActionSettings(BaseModel):
    """Полный набор входных параметров шага (ключи файла пишутся через дефис)."""
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=_hyphenate,
        populate_by_name=True,
    )

    url: HttpUrlStr = Field(..., description="Проверяемый URL.")
    timeout: int = Field(30, gt=0)
    max_connections: int = Field(10, gt=0)
    max_connections_per_host: int = Field(5, gt=0)
    buffer_size: int = Field(16384, gt=0)
    max_redirects: int = Field(10, gt=0)
    exclude: Tuple[str, ...] = Field(default_factory=tuple)
    include_browser_headers: bool = True
    skip_tls_verification: bool = False
    fail_on_error: bool = True
    verbose: bool = False
    wait_for_url: bool = False
    wait_for_content: str = ""
    wait_timeout: float = Field(300.0, gt=0)
    wait_interval: float = Field(5.0, gt=0)
    muffet_path: Optional[str] = Field(None, description="Готовый бинарник muffet; иначе установка.")

    @field_validator("exclude", mode="before")
    def _normalize_exclude(cls, v: Any) -> Tuple[str, ...]:
        return split_patterns(v)

    @field_validator("wait_for_content", mode="before")
    def _strip_content(cls, v: Any) -> Any:
        # пустой после обрезки шаблон означает "не ждать контент"
        return v.strip() if isinstance(v, str) else v

    @property
    def wants_readiness(self) -> bool:
        return self.wait_for_url or bool(self.wait_for_content)

    def readiness_config(self) -> ReadinessConfig:
        return ReadinessConfig(
            target_url=self.url,
            require_reachable=self.wait_for_url,
            content_pattern=self.wait_for_content or None,
            timeout=self.wait_timeout,
            interval=self.wait_interval,
            skip_tls_verify=self.skip_tls_verification,
        )

    def check_config(self) -> CheckConfig:
        return CheckConfig(
            target_url=self.url,
            timeout=self.timeout,
            max_connections=self.max_connections,
            max_connections_per_host=self.max_connections_per_host,
            buffer_size=self.buffer_size,
            max_redirects=self.max_redirects,
            exclude_patterns=self.exclude,
            include_browser_headers=self.include_browser_headers,
            skip_tls_verify=self.skip_tls_verification,
            verbose=self.verbose,
        )


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def read_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """Читает YAML или JSON файл и возвращает mapping с ключами как в файле."""
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(
    path: Union[str, Path, None] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ActionSettings:
    """
    Собирает ActionSettings: значения из файла (если указан) перекрываются
    непустыми (не None) значениями из *overrides* (опции CLI / окружение).
    """
    data: Dict[str, Any] = {}
    if path is not None:
        # ключи файла приводим к именам полей, чтобы overrides их перекрывали
        data.update({str(k).replace("-", "_"): v for k, v in read_config_file(path).items()})
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ActionSettings(**data)
    except ValidationError:
        raise
