# === FILE: csp_scout/cli.py ===
"""
Точка входа для запуска CSP Scout через командную строку.

Команды:
  scan      Обойти страницы из sitemap и сохранить CSP-отчёты
  config    Показать итоговую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (необязательно)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда scan опции:
  --sitemap URL|PATH  URL sitemap.xml или путь к файлу (обязательно, если нет в конфиге)
  --out DIR           Каталог для отчётов (default: ./out)
  --concurrency INT   Число параллельных запросов (default: 8)
  --limit INT         Макс. число URL, 0 = без лимита
  --timeout SEC       Таймаут на один запрос
  --user-agent UA     Заголовок User-Agent
  --html              Дополнительно сохранить HTML-отчёт
  --scan-timeout SEC  Таймаут всего сканирования (секунд)

Дополнительно:
  --version, -v       Показать версию CSP Scout

Пример:
  csp-scout scan --sitemap https://example.com/sitemap.xml --out ./out --concurrency 10
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from csp_scout import __version__
from csp_scout.config import build_config
from csp_scout.engine import Engine
from csp_scout.exceptions import SitemapError
from csp_scout.logger import init_logging
from csp_scout.report import write_reports

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _load(ctx, **overrides):
    try:
        return build_config(ctx.obj['config_path'], **overrides)
    except (OSError, ValueError, TypeError, ValidationError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='CSP Scout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
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
    """Группа команд CSP Scout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('scan', context_settings=CONTEXT_SETTINGS)
@click.option('--sitemap', '-s', 'sitemap', default=None, help='URL sitemap.xml или путь к локальному файлу.')
@click.option(
    '--out', '-o', 'out_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Каталог для отчётов (default: ./out)'
)
@click.option('--concurrency', 'concurrency', type=int, default=None, help='Число параллельных запросов (default: 8)')
@click.option('--limit', '-l', 'limit', type=int, default=None, help='Макс. число URL, 0 = без лимита')
@click.option('--timeout', 'timeout', type=int, default=None, help='Таймаут на один запрос, секунд (default: 20)')
@click.option('--user-agent', 'user_agent', default=None, help='Заголовок User-Agent')
@click.option('--html', 'html', is_flag=True, help='Дополнительно сохранить HTML-отчёт')
@click.option(
    '--scan-timeout', 'scan_timeout',
    type=float,
    default=None,
    help='Таймаут всего сканирования (секунд)'
)
@click.pass_context
def scan(ctx, sitemap, out_dir, concurrency, limit, timeout, user_agent, html, scan_timeout):
    """Обойти страницы из sitemap и сохранить отчёты."""
    cfg = _load(
        ctx,
        sitemap=sitemap,
        out_dir=out_dir,
        concurrency=concurrency,
        limit=limit,
        timeout=timeout,
        user_agent=user_agent,
    )
    click.echo(f'Sitemap: {cfg.sitemap}')
    try:
        report = Engine(cfg).start_scan(scan_timeout=scan_timeout)
    except asyncio.TimeoutError:
        print_error(f'Сканирование не завершено за {scan_timeout} секунд')
    except SitemapError as e:
        print_error(f'Ошибка чтения sitemap: {e}')

    try:
        paths = write_reports(report, cfg.out_dir, html=html)
    except OSError as e:
        print_error(f'Ошибка при сохранении отчётов: {e}')

    click.echo('Done.')
    click.echo('Outputs:')
    for path in paths:
        click.echo(f' - {path}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.option('--sitemap', '-s', 'sitemap', default=None, help='Перекрыть sitemap из конфига.')
@click.pass_context
def show_config(ctx, sitemap):
    """Показать итоговую конфигурацию в JSON."""
    cfg = _load(ctx, sitemap=sitemap)
    click.echo(json.dumps(cfg.model_dump(mode='json'), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
