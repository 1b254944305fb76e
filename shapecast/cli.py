# shapecast/cli.py
"""
SHAPECAST CLI -- Click commands around the extraction service.

Provides the ``shapecast`` console entry-point declared in pyproject.toml as
``shapecast.cli:cli``:

- extract:  run one extraction against the configured model
- compile:  compile a shape file and print its JSON Schema (no model call)
- serve:    run the HTTP API with uvicorn
- config:   show the resolved configuration
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import click
from rich import box
from rich.table import Table

from . import __version__
from .config import get_config
from .display import SHAPECAST_COLORS, console, styled_message
from .extractor import ExtractionError, extract
from .generation import OpenAIChatGenerator
from .schemas.shape_compiler import ShapeError, load_shape_file, synthesize
from .utils.logging import setup_logging


def _load_shape(path: Path) -> Any:
    try:
        return load_shape_file(path)
    except ShapeError as exc:
        raise click.ClickException(str(exc))


def _synthesize(shape: Any):
    try:
        return synthesize(shape)
    except ShapeError as exc:
        raise click.ClickException(str(exc))


def _mask(api_key: str) -> str:
    if not api_key:
        return "[dim]not set[/dim]"
    return api_key[:4] + "···" + api_key[-4:] if len(api_key) > 8 else "***"


@click.group()
@click.version_option(__version__, prog_name="shapecast")
def cli() -> None:
    """SHAPECAST -- convert free text into JSON of a given shape."""


@cli.command("extract")
@click.argument("data_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "shape_file", type=click.Path(exists=True, dir_okay=False, path_type=Path), required=True, help="Shape description file (.json, .yaml or .yml).")
@click.option("--retries", type=click.IntRange(min=0), default=None, help="Retries after the first failed attempt (default: SHAPECAST_MAX_RETRIES).")
@click.option("--model", type=str, default=None, help="Model identifier (default: SHAPECAST_LM).")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write the result to a JSON file instead of stdout.")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False), default=None)
def extract_cmd(
    data_file: Path,
    shape_file: Path,
    retries: Optional[int],
    model: Optional[str],
    output: Optional[Path],
    log_level: Optional[str],
) -> None:
    """Extract JSON shaped like --format from DATA_FILE."""
    cfg = get_config()
    setup_logging(cfg, level=log_level)

    shape = _load_shape(shape_file)
    validator = _synthesize(shape)
    raw_text = data_file.read_text(encoding="utf-8")

    generator = OpenAIChatGenerator.from_config(cfg)
    if model:
        generator.model = model

    try:
        result = asyncio.run(
            extract(
                raw_text,
                validator,
                shape,
                retries=cfg.max_retries if retries is None else retries,
                generator=generator,
            )
        )
    except ExtractionError as exc:
        raise click.ClickException(str(exc))

    payload = json.dumps(result, indent=2, ensure_ascii=False)
    if output is None:
        click.echo(payload)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload + "\n", encoding="utf-8")
    styled_message(f"Saved result → {output}", "success")


@cli.command("compile")
@click.argument("shape_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def compile_cmd(shape_file: Path) -> None:
    """Compile SHAPE_FILE and print the JSON Schema it validates against."""
    validator = _synthesize(_load_shape(shape_file))
    click.echo(json.dumps(validator.json_schema(), indent=2, ensure_ascii=False))


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address (default: SHAPECAST_HOST).")
@click.option("--port", type=int, default=None, help="Port (default: SHAPECAST_PORT).")
@click.option("--reload", is_flag=True, default=False, help="Reload on code changes.")
def serve(host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Run the HTTP API."""
    import uvicorn

    cfg = get_config()
    uvicorn.run(
        "shapecast.api:app",
        host=host or cfg.host,
        port=port or cfg.port,
        reload=reload,
    )


@cli.command()
def config() -> None:
    """Show current configuration."""
    cfg = get_config()
    t = Table(box=box.SIMPLE, show_header=False, border_style=SHAPECAST_COLORS["muted"])
    t.add_column("key", style=SHAPECAST_COLORS["info"])
    t.add_column("value")
    t.add_row("lm", cfg.lm)
    t.add_row("api_base", cfg.api_base or "[dim]default[/dim]")
    t.add_row("api_key", _mask(cfg.api_key))
    t.add_row("lm_temperature", str(cfg.lm_temperature))
    t.add_row("max_retries", str(cfg.max_retries))
    t.add_row("attempt_timeout", f"{cfg.attempt_timeout:g}s")
    t.add_row("host", cfg.host)
    t.add_row("port", str(cfg.port))
    t.add_row("log_level", cfg.log_level)
    t.add_row("log_dir", str(cfg.log_dir))
    console.print(t)


if __name__ == "__main__":
    cli()
