# === FILE: content_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска ContentScout через командную строку.

Команды:
  fetch     Обойти сайт (или sitemap) и собрать читаемый контент страниц
  digest    Собрать содержимое файлов каталога в один документ
  run       Выполнить запуск, описанный в YAML/JSON-конфиге
  config    Показать проверенную конфигурацию запуска

Общие опции:
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Дополнительно:
  --version, -v       Показать версию ContentScout

Пример:
  content-scout fetch https://docs.example.com --limit 50 --depth 2 -o docs.md
  content-scout digest ./src --format json -o codebase.jsonl
"""
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import click
from pydantic import ValidationError

from content_scout import __version__
from content_scout.adapters import get_adapter
from content_scout.config import AdapterOptions, FormatterOptions, RunConfig, load_config
from content_scout.errors import ContentScoutError, PipelineError
from content_scout.ignore import build_ignore_patterns
from content_scout.logger import get_logger, init_logging
from content_scout.pipeline import PipelineOptions, PipelineResult, run_pipeline_sync
from content_scout.report import get_formatter
from content_scout.transformers import TransformContext, Transformer, get_transformer

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])
FORMATS = ["markdown", "json", "text"]

logger = get_logger("cli")


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _execute(
    adapter_name: str,
    source: str,
    output: str,
    fmt: str,
    transformer_names: Sequence[str],
    adapter_options: AdapterOptions,
    formatter_options: Optional[FormatterOptions] = None,
    flags: Optional[Dict[str, Any]] = None,
) -> PipelineResult:
    """Собирает стадии конвейера по именам и запускает его с выводом в *output*."""
    try:
        adapter = get_adapter(adapter_name)
        formatter = get_formatter(fmt)
        transformers: List[Transformer] = [get_transformer(name) for name in transformer_names]
    except ContentScoutError as e:
        print_error(str(e))

    options = PipelineOptions(
        adapter_options=adapter_options,
        formatter_options=formatter_options or FormatterOptions(),
        transform_context=TransformContext(flags=dict(flags or {})),
    )
    try:
        # "-" is stdout
        with click.open_file(output, 'w', encoding='utf-8') as sink:
            result = run_pipeline_sync(adapter, transformers, formatter, source, sink, options)
    except PipelineError as e:
        if e.cause is not None:
            logger.debug("Underlying cause: %r", e.cause)
        print_error(str(e))
    except OSError as e:
        print_error(f'Ошибка записи в {output}: {e}')

    if output != '-':
        click.echo(f'Output: {output}')
    click.echo(f'Processed {result.item_count} items in {result.duration:.2f}s.')
    if result.error_count:
        click.secho(f'Encountered {result.error_count} errors during processing.', fg='yellow', err=True)
    return result


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='ContentScout, version %(version)s')
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'VERBOSE', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(name)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, log_level, log_file, log_format):
    """Группа команд ContentScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)


@cli.command('fetch', context_settings=CONTEXT_SETTINGS)
@click.argument('source')
@click.option('--output', '-o', default='site_content.md', show_default=True, help='Файл вывода ("-" для stdout)')
@click.option('--format', '-f', 'fmt', default='markdown', show_default=True, type=click.Choice(FORMATS))
@click.option('--match', '-m', multiple=True, help='Glob-шаблон пути URL (можно повторять)')
@click.option('--selector', '-s', 'content_selector', default=None, help='CSS-селектор основного контента')
@click.option('--concurrency', '-c', default=5, show_default=True, type=click.IntRange(min=1))
@click.option('--limit', '-l', default=None, type=click.IntRange(min=1), help='Макс. число загрузок страниц')
@click.option('--depth', '-d', default=3, show_default=True, type=click.IntRange(min=0))
@click.option('--use-sitemap/--no-use-sitemap', default=True, show_default=True, help='Искать sitemap.xml')
@click.option('--timeout', default=15.0, show_default=True, type=click.FloatRange(min=0, min_open=True))
@click.option('--whitespace-removal', is_flag=True, help='Убрать лишние пробелы в тексте')
@click.pass_context
def fetch(ctx, source, output, fmt, match, content_selector, concurrency, limit, depth, use_sitemap, timeout,
          whitespace_removal):
    """Обойти сайт или sitemap SOURCE и сохранить контент страниц."""
    try:
        adapter_options = AdapterOptions(
            match=list(match) or None,
            content_selector=content_selector,
            concurrency=concurrency,
            limit=limit,
            depth=depth,
            use_sitemap=use_sitemap,
            timeout=timeout,
        )
    except ValidationError as e:
        print_error(f'Неверные опции: {e}')
    click.echo(f'Fetching content from: {source}')
    _execute(
        'website', source, output, fmt,
        ['whitespace'] if whitespace_removal else [],
        adapter_options,
        flags=ctx.params,
    )


def _ignore_patterns(root, **kwargs):
    try:
        return build_ignore_patterns(root, **kwargs)
    except OSError as e:
        print_error(f'Ошибка чтения ignore-файла: {e}')


@cli.command('digest', context_settings=CONTEXT_SETTINGS)
@click.argument('directory', type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option('--output', '-o', default='codebase.md', show_default=True, help='Файл вывода ("-" для stdout)')
@click.option('--format', '-f', 'fmt', default='markdown', show_default=True, type=click.Choice(FORMATS))
@click.option('--match', '-m', multiple=True, help='Glob-шаблон включаемых файлов (можно повторять)')
@click.option('--ignore', '-i', multiple=True, help='Gitignore-шаблон для исключения (можно повторять)')
@click.option('--ignore-file', default=None, help='Пользовательский ignore-файл (относительно DIRECTORY)')
@click.option('--use-gitignore/--no-use-gitignore', default=True, show_default=True)
@click.option('--default-ignores/--no-default-ignores', default=True, show_default=True)
@click.option('--whitespace-removal', is_flag=True, help='Убрать лишние пробелы (кроме чувствительных файлов)')
@click.pass_context
def digest(ctx, directory, output, fmt, match, ignore, ignore_file, use_gitignore, default_ignores,
           whitespace_removal):
    """Собрать файлы каталога DIRECTORY в один документ."""
    patterns, custom_path = _ignore_patterns(
        directory,
        cli=ignore,
        ignore_file=ignore_file,
        use_gitignore=use_gitignore,
        default_ignores=default_ignores,
    )
    adapter_options = AdapterOptions(
        match=list(match) or None,
        ignore_patterns=patterns,
        use_gitignore=use_gitignore,
        ignore_file_path=custom_path,
    )
    click.echo(f'Digesting directory: {directory}')
    _execute(
        'filesystem', str(directory), output, fmt,
        ['whitespace'] if whitespace_removal else [],
        adapter_options,
        flags={k: (list(v) if isinstance(v, tuple) else v) for k, v in ctx.params.items()},
    )


def _load_run_config(config_path: Path) -> RunConfig:
    try:
        return load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        # pydantic.ValidationError is a ValueError
        print_error(f'Ошибка загрузки конфигурации: {e}')


@cli.command('run', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--config', '-c', 'config_path',
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к YAML/JSON-конфигу запуска.'
)
@click.option('--output', '-o', default=None, help='Переопределить файл вывода из конфига')
def run(config_path, output):
    """Выполнить запуск по конфигу."""
    cfg = _load_run_config(config_path)
    adapter_options = cfg.adapter_options
    if cfg.adapter == 'filesystem':
        patterns, custom_path = _ignore_patterns(
            cfg.source,
            cli=adapter_options.ignore_patterns.cli,
            ignore_file=adapter_options.ignore_file_path,
            use_gitignore=adapter_options.use_gitignore,
        )
        if adapter_options.ignore_patterns.default:
            patterns.default = list(adapter_options.ignore_patterns.default)
        adapter_options = adapter_options.model_copy(
            update={'ignore_patterns': patterns, 'ignore_file_path': custom_path}
        )
    click.echo(f'Running {cfg.adapter} pipeline for: {cfg.source}')
    _execute(
        cfg.adapter, cfg.source, output or cfg.output, cfg.format,
        cfg.transformers,
        adapter_options,
        cfg.formatter_options,
        flags={'config': str(config_path)},
    )


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--config', '-c', 'config_path',
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
def show_config(config_path):
    """Показать проверенную конфигурацию в JSON."""
    cfg = _load_run_config(config_path)
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
