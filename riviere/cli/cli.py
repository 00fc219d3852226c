"""
CLI entry point for Riviere.

Extracts architectural components from TypeScript sources according to a
declarative extraction config. Uses Typer for the command line and prints
JSON envelopes on stdout.

Usage:
    riviere extract --config riviere.config.yaml
    riviere extract --config riviere.config.yaml --dry-run
    riviere extract --config riviere.config.yaml --output components.json
    riviere validate --config riviere.config.yaml
"""

from __future__ import annotations

import json
import sys
from collections import Counter
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from riviere.common.exceptions import (
    ConfigFileNotFoundError,
    ExtractionError,
    RiviereError,
)
from riviere.common.logging import configure_logging
from riviere.common.types import DraftComponent
from riviere.services.config_models import RiviereSettings
from riviere.services.extraction import format_dry_run, load_resolved_config, run_extraction

# Error codes reported in JSON error envelopes
CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
VALIDATION_ERROR = "VALIDATION_ERROR"
EXTRACTION_ERROR = "EXTRACTION_ERROR"

app = typer.Typer(
    name="riviere",
    help="Riviere CLI - Extract architectural components from TypeScript code",
    no_args_is_help=True,
)

ConfigOption = Annotated[
    Path, typer.Option("--config", "-c", help="Path to extraction config file")
]


# =============================================================================
# Output Helpers
# =============================================================================


def format_success(data: Any, warnings: list[str] | None = None) -> dict[str, Any]:
    """Build a success envelope."""
    return {"success": True, "data": data, "warnings": warnings or []}


def format_error(code: str, message: str, suggestions: list[str] | None = None) -> dict[str, Any]:
    """Build an error envelope."""
    return {
        "success": False,
        "error": {"code": code, "message": message, "suggestions": suggestions or []},
    }


def error_code(error: RiviereError) -> str:
    """Map an exception to its envelope error code."""
    if isinstance(error, ConfigFileNotFoundError):
        return CONFIG_NOT_FOUND
    if isinstance(error, ExtractionError):
        return EXTRACTION_ERROR
    return VALIDATION_ERROR


def _echo_json(payload: dict[str, Any]) -> None:
    typer.echo(json.dumps(payload))


def _fail(error: RiviereError) -> NoReturn:
    _echo_json(format_error(error_code(error), str(error)))
    raise typer.Exit(1)


def _load_settings(verbose: bool) -> RiviereSettings:
    load_dotenv()
    settings = RiviereSettings()
    configure_logging("INFO" if verbose else settings.log_level)
    return settings


def _print_summary(console: Console, components: list[DraftComponent], files: list[str]) -> None:
    """Print a per-domain component table to stderr."""
    counts = Counter((c["domain"], c["type"]) for c in components)

    table = Table(title=f"Extracted {len(components)} component(s) from {len(files)} file(s)")
    table.add_column("Domain", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Count", justify="right")
    for (domain, component_type), count in sorted(counts.items()):
        table.add_row(domain, component_type, str(count))

    console.print(table)


# =============================================================================
# Commands
# =============================================================================


@app.command("extract")
def extract(
    config: ConfigOption,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Show component counts per domain only")
    ] = False,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write JSON output to a file")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Print a summary table to stderr")
    ] = False,
) -> None:
    """Extract architectural components from source code."""
    settings = _load_settings(verbose)

    if not config.is_file():
        _echo_json(format_error(CONFIG_NOT_FOUND, f"Config file not found: {config}"))
        raise typer.Exit(1)

    try:
        result = run_extraction(config, dry_run=dry_run, settings=settings)
    except RiviereError as e:
        _fail(e)

    if verbose:
        _print_summary(Console(stderr=True), result.components, result.files)

    if dry_run:
        for line in format_dry_run(result.components):
            typer.echo(line)
        return

    payload = json.dumps(format_success(result.components))
    if output:
        output.write_text(payload + "\n", encoding="utf-8")
        typer.echo(f"Wrote {len(result.components)} component(s) to {output}", err=True)
        return

    typer.echo(payload)


@app.command("validate")
def validate(config: ConfigOption) -> None:
    """Validate and resolve an extraction config."""
    _load_settings(verbose=False)

    if not config.is_file():
        _echo_json(format_error(CONFIG_NOT_FOUND, f"Config file not found: {config}"))
        raise typer.Exit(1)

    try:
        resolved = load_resolved_config(config)
    except RiviereError as e:
        _fail(e)

    modules = [{"name": m.name, "path": m.path} for m in resolved.modules]
    _echo_json(format_success({"valid": True, "modules": modules}))


def main() -> int:
    """Main entry point."""
    try:
        app()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1


if __name__ == "__main__":
    sys.exit(main())
