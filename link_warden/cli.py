#!/usr/bin/env python3
"""
Точка входа LinkWarden через командную строку.

Команды:
  check     Дождаться URL (если запрошено), запустить muffet и вывести вердикт
  wait      Только дождаться готовности URL
  install   Установить muffet в кэш и напечатать путь к бинарнику
  config    Показать итоговые настройки

Общие опции:
  --config PATH       YAML/JSON файл с входными параметрами (ключи через дефис)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Каждый входной параметр можно задать опцией или переменной окружения
LINK_WARDEN_<ИМЯ>, например LINK_WARDEN_MAX_CONNECTIONS=20. Опции CLI
перекрывают значения из файла.

Пример:
  link-warden check --url https://example.com --wait-for-content "Welcome" --exclude "linkedin.com"
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from link_warden import __version__
from link_warden.config import load_config
from link_warden.engine import Engine
from link_warden.installer import MUFFET_VERSION, install_muffet
from link_warden.logger import init_logging, logger
from link_warden.outputs import write_outputs
from link_warden.readiness import TimedOut
from link_warden.report.json_report import render_json
from link_warden.report.summary import write_summary

CONTEXT_SETTINGS = dict(help_option_names=["--help"])
ENV_PREFIX = "LINK_WARDEN_"


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _env(name: str) -> str:
    return ENV_PREFIX + name.upper().replace('-', '_')


def _input(name: str, **kwargs):
    """Опция входного параметра: default=None, чтобы не перекрывать значения из файла."""
    kwargs.setdefault('default', None)
    return click.option(f'--{name}', envvar=_env(name), show_envvar=True, **kwargs)


_URL_OPTION = _input('url', help='Проверяемый URL.')

_WAIT_OPTIONS = [
    _input('wait-for-url', type=click.BOOL, metavar='BOOL', help='Ждать HTTP 200 перед проверкой.'),
    _input('wait-for-content', help='Регулярное выражение, которое должно найтись в теле ответа.'),
    _input('wait-timeout', type=float, help='Дедлайн ожидания, секунд (300).'),
    _input('wait-interval', type=float, help='Пауза между попытками, секунд (5).'),
    _input('skip-tls-verification', type=click.BOOL, metavar='BOOL', help='Не проверять TLS-сертификаты.'),
]

_CHECK_OPTIONS = [
    _input('timeout', type=int, help='Таймаут одного запроса muffet, секунд (30).'),
    _input('max-connections', type=int, help='Макс. число соединений (10).'),
    _input('max-connections-per-host', type=int, help='Макс. число соединений на хост (5).'),
    _input('buffer-size', type=int, help='Размер буфера HTTP-ответа (16384).'),
    _input('max-redirects', type=int, help='Макс. число редиректов (10).'),
    _input('exclude', help='Шаблоны исключений, по одному на строку.'),
    _input('include-browser-headers', type=click.BOOL, metavar='BOOL', help='Добавлять браузерные заголовки (true).'),
    _input('fail-on-error', type=click.BOOL, metavar='BOOL', help='Проваливать шаг при битых ссылках (true).'),
    _input('verbose', type=click.BOOL, metavar='BOOL', help='Подробный вывод muffet.'),
    _input('muffet-path', help='Готовый бинарник muffet (иначе установка в кэш).'),
]


def _apply(options):
    def decorator(func):
        for option in reversed(options):
            func = option(func)
        return func
    return decorator


def _settings(ctx, overrides):
    try:
        return load_config(ctx.obj.get('config_path'), overrides)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='LinkWarden, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    envvar=_env('config'),
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к YAML/JSON файлу с входными параметрами.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Ожидание готовности сайта и проверка ссылок с помощью muffet."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('check', context_settings=CONTEXT_SETTINGS)
@_URL_OPTION
@_apply(_CHECK_OPTIONS)
@_apply(_WAIT_OPTIONS)
@click.option(
    '--output-file', 'output_file',
    default=None,
    envvar='GITHUB_OUTPUT',
    type=click.Path(dir_okay=False, path_type=Path),
    help='Файл выходных значений (key=value).'
)
@click.option(
    '--summary-file', 'summary_file',
    default=None,
    envvar='GITHUB_STEP_SUMMARY',
    type=click.Path(dir_okay=False, path_type=Path),
    help='Дописать Markdown-сводку в файл.'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-вердикт в файл'
)
@click.option(
    '--report-dir', 'report_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Каталог для muffet-report.txt (по умолчанию $GITHUB_WORKSPACE/.linkcheck)'
)
@click.pass_context
def check(ctx, output_file, summary_file, json_output, report_dir, **inputs):
    """Дождаться URL, запустить muffet и выставить выходные значения."""
    settings = _settings(ctx, inputs)
    engine = Engine(settings, report_dir=report_dir)
    try:
        verdict = asyncio.run(engine.run())
    except Exception as e:
        print_error(f'Action failed: {e}')

    try:
        write_outputs(verdict.outputs(), output_file)
        if summary_file:
            write_summary(verdict, settings.url, summary_file)
        if json_output:
            saved_json = render_json(verdict, json_output)
            click.echo(f'JSON report: {saved_json}')
    except Exception as e:
        print_error(f'Action failed: {e}')

    if verdict.failed:
        print_error(verdict.message)


@cli.command('wait', context_settings=CONTEXT_SETTINGS)
@_URL_OPTION
@_apply(_WAIT_OPTIONS)
@click.pass_context
def wait(ctx, **inputs):
    """Только дождаться готовности URL (HTTP 200 и, если задано, совпадения контента)."""
    if inputs.get('wait_for_url') is None:
        inputs['wait_for_url'] = True
    settings = _settings(ctx, inputs)
    outcome = asyncio.run(Engine(settings).wait_until_ready())
    if isinstance(outcome, TimedOut):
        print_error(outcome.reason)
    click.echo(f'URL is ready: {settings.url}')


@cli.command('install', context_settings=CONTEXT_SETTINGS)
@click.option('--muffet-version', 'version', default=MUFFET_VERSION, show_default=True, help='Версия muffet.')
@click.option(
    '--cache-dir', 'cache_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Корень кэша (по умолчанию $RUNNER_TOOL_CACHE или ~/.cache/link-warden)'
)
def install(version, cache_dir):
    """Установить muffet и напечатать путь к бинарнику."""
    try:
        binary = asyncio.run(install_muffet(version, cache_root=cache_dir, logger=logger))
    except Exception as e:
        print_error(f'Action failed: {e}')
    click.echo(str(binary))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@_URL_OPTION
@_apply(_CHECK_OPTIONS)
@_apply(_WAIT_OPTIONS)
@click.pass_context
def show_config(ctx, **inputs):
    """Показать итоговые настройки в JSON."""
    settings = _settings(ctx, inputs)
    click.echo(json.dumps(settings.model_dump(by_alias=True), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    cli()
