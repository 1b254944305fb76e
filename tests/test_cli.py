# tests/test_cli.py
"""Tests for the CLI."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from shapecast import __version__


@pytest.fixture
def fake_generator(monkeypatch, scripted):
    """Route ``OpenAIChatGenerator.from_config`` to a scripted generator."""

    def _install(*replies):
        generator = scripted(*replies)

        class _Factory:
            @staticmethod
            def from_config(cfg):
                return generator

        monkeypatch.setattr("shapecast.cli.OpenAIChatGenerator", _Factory)
        monkeypatch.setattr("shapecast.cli.setup_logging", lambda *args, **kwargs: None)
        return generator

    return _install


@pytest.fixture
def files(tmp_path):
    data = tmp_path / "note.txt"
    data.write_text("Ada Lovelace is 36.", encoding="utf-8")
    shape = tmp_path / "shape.yaml"
    shape.write_text("name: string\nage: number\n", encoding="utf-8")
    return data, shape


class TestCLI:

    def test_help(self):
        from shapecast.cli import cli
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("extract", "compile", "serve", "config"):
            assert command in result.output

    def test_version_flag(self):
        from shapecast.cli import cli
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_compile_prints_schema(self, files):
        from shapecast.cli import cli
        _, shape = files
        result = CliRunner().invoke(cli, ["compile", str(shape)])
        assert result.exit_code == 0
        schema = json.loads(result.output)
        assert set(schema["required"]) == {"name", "age"}

    def test_compile_rejects_unsupported_shape(self, tmp_path):
        from shapecast.cli import cli
        shape = tmp_path / "shape.json"
        shape.write_text('{"born": {"type": "date"}}', encoding="utf-8")
        result = CliRunner().invoke(cli, ["compile", str(shape)])
        assert result.exit_code != 0
        assert "Unsupported data type" in result.output

    def test_extract_prints_result(self, files, fake_generator):
        from shapecast.cli import cli
        data, shape = files
        generator = fake_generator('{"name": "Ada", "age": 36}')
        result = CliRunner().invoke(cli, ["extract", str(data), "--format", str(shape)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"name": "Ada", "age": 36}
        assert len(generator.calls) == 1

    def test_extract_writes_output_file(self, files, fake_generator, tmp_path):
        from shapecast.cli import cli
        data, shape = files
        fake_generator('{"name": "Ada", "age": null}')
        out = tmp_path / "out" / "result.json"
        result = CliRunner().invoke(
            cli, ["extract", str(data), "--format", str(shape), "-o", str(out)]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text(encoding="utf-8")) == {"name": "Ada", "age": None}

    def test_extract_failure_exits_nonzero(self, files, fake_generator):
        from shapecast.cli import cli
        data, shape = files
        generator = fake_generator("not json")
        result = CliRunner().invoke(
            cli, ["extract", str(data), "--format", str(shape), "--retries", "2"]
        )
        assert result.exit_code != 0
        assert "Extraction failed after 3 attempts" in result.output
        assert len(generator.calls) == 3

    def test_config_command(self):
        from shapecast.cli import cli
        result = CliRunner().invoke(cli, ["config"])
        assert result.exit_code == 0
        assert "max_retries" in result.output
