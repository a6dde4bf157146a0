# File: tests/test_cli.py
"""Тесты для CLI (`content_scout/cli.py`) с использованием click.testing.CliRunner.
Проверяют команды `fetch`, `digest`, `run`, `config`, `--version`, а также обработку ошибок.
"""
import json

import pytest
from click.testing import CliRunner

import content_scout.cli as cli_module
from content_scout.cli import cli
from content_scout.errors import PipelineError
from content_scout.pipeline import PipelineResult


@pytest.fixture()
def calls(monkeypatch):
    """Патчим run_pipeline_sync: записываем аргументы и пишем маркер в приёмник."""
    recorded = []

    def fake_run(adapter, transformers, formatter, source, sink, options):
        recorded.append(
            {
                "adapter": adapter.name,
                "transformers": [t.name for t in transformers],
                "formatter": formatter.name,
                "source": source,
                "options": options,
            }
        )
        sink.write("formatted output\n")
        return PipelineResult(item_count=2, error_count=1, duration=0.01)

    monkeypatch.setattr(cli_module, "run_pipeline_sync", fake_run)
    return recorded


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "ContentScout" in result.output


def test_fetch_builds_website_pipeline(calls, tmp_path):
    out = tmp_path / "site.md"
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "fetch", "https://example.com/docs",
            "-o", str(out),
            "--limit", "10", "--depth", "1", "--concurrency", "3",
            "--match", "/docs/**", "--selector", "main",
            "--no-use-sitemap", "--whitespace-removal",
        ],
    )
    assert result.exit_code == 0, result.output
    assert out.read_text(encoding="utf-8") == "formatted output\n"
    assert "Processed 2 items" in result.output

    (call,) = calls
    assert call["adapter"] == "website"
    assert call["formatter"] == "markdown"
    assert call["transformers"] == ["whitespace"]
    opts = call["options"].adapter_options
    assert (opts.limit, opts.depth, opts.concurrency) == (10, 1, 3)
    assert opts.match == ["/docs/**"]
    assert opts.content_selector == "main"
    assert opts.use_sitemap is False


def test_fetch_to_stdout_as_json(calls):
    runner = CliRunner()
    result = runner.invoke(cli, ["fetch", "https://example.com", "-o", "-", "--format", "json"])
    assert result.exit_code == 0
    assert "formatted output" in result.output
    assert calls[0]["formatter"] == "json"


def test_fetch_rejects_invalid_limit(calls):
    runner = CliRunner()
    result = runner.invoke(cli, ["fetch", "https://example.com", "--limit", "0"])
    assert result.exit_code != 0
    assert calls == []


def test_digest_collects_ignore_sources(calls, tmp_path):
    (tmp_path / ".gitignore").write_text("secret/\n", encoding="utf-8")
    (tmp_path / "extra.ignore").write_text("*.tmp\n", encoding="utf-8")
    out = tmp_path / "codebase.md"
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "digest", str(tmp_path),
            "-o", str(out),
            "--ignore", "dist/", "--ignore-file", "extra.ignore",
            "--no-default-ignores",
        ],
    )
    assert result.exit_code == 0, result.output
    (call,) = calls
    assert call["adapter"] == "filesystem"
    patterns = call["options"].adapter_options.ignore_patterns
    assert patterns.default == []
    assert patterns.cli == ["dist/"]
    assert patterns.custom_file == ["*.tmp"]
    assert patterns.gitignore == ["secret/"]
    assert call["options"].transform_context.flags["ignore"] == ["dist/"]


def test_digest_missing_directory(calls, tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["digest", str(tmp_path / "missing")])
    assert result.exit_code != 0
    assert calls == []


def test_run_from_config(calls, tmp_path):
    cfg_file = tmp_path / "run.yaml"
    cfg_file.write_text(
        "source: https://example.com\n"
        "adapter: website\n"
        f"output: {tmp_path / 'out.jsonl'}\n"
        "format: json\n"
        "transformers: [drop-empty]\n"
        "adapter_options:\n  limit: 5\n",
        encoding="utf-8",
    )
    runner = CliRunner()
    result = runner.invoke(cli, ["run", "--config", str(cfg_file)])
    assert result.exit_code == 0, result.output
    (call,) = calls
    assert call["formatter"] == "json"
    assert call["transformers"] == ["drop-empty"]
    assert call["options"].adapter_options.limit == 5
    assert (tmp_path / "out.jsonl").exists()


def test_run_filesystem_with_unreadable_ignore_file(calls, tmp_path):
    project = tmp_path / "project"
    (project / "ignore-dir").mkdir(parents=True)
    cfg_file = tmp_path / "run.json"
    cfg_file.write_text(
        json.dumps({
            "source": str(project),
            "adapter": "filesystem",
            "adapter_options": {"ignore_file_path": "ignore-dir"},
        }),
        encoding="utf-8",
    )
    runner = CliRunner()
    result = runner.invoke(cli, ["run", "--config", str(cfg_file), "-o", str(tmp_path / "o.md")])
    assert result.exit_code == 1
    assert "Ошибка чтения ignore-файла" in result.output
    assert calls == []


def test_run_with_unknown_transformer(calls, tmp_path):
    cfg_file = tmp_path / "run.json"
    cfg_file.write_text(json.dumps({"source": "https://example.com", "transformers": ["nope"]}), encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["run", "--config", str(cfg_file), "-o", str(tmp_path / "o.md")])
    assert result.exit_code == 1
    assert "unknown transformer" in result.output
    assert calls == []


def test_show_config(tmp_path):
    cfg_file = tmp_path / "run.json"
    cfg_file.write_text(json.dumps({"source": "./src", "adapter": "filesystem"}), encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["config", "--config", str(cfg_file)])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["source"] == "./src"
    assert data["adapter_options"]["depth"] == 3


def test_invalid_config_reports_error(tmp_path):
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text("adapter: website\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["config", "--config", str(cfg_file)])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_pipeline_error_exits_with_message(monkeypatch, tmp_path):
    def failing(*args, **kwargs):
        raise PipelineError("Pipeline execution failed: boom", RuntimeError("boom"))

    monkeypatch.setattr(cli_module, "run_pipeline_sync", failing)
    runner = CliRunner()
    result = runner.invoke(cli, ["fetch", "https://example.com", "-o", str(tmp_path / "x.md")])
    assert result.exit_code == 1
    assert "Data Preparation Error: Pipeline execution failed: boom" in result.output
