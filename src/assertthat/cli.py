from __future__ import annotations

from pathlib import Path

import typer

app = typer.Typer(name="assertthat", help="Check natural-language assertion phrases")


@app.command()
def check(
    paths: list[str] = typer.Argument(help="Python files or directories to check"),
    config: str | None = typer.Option(None, help="Path to assertthat YAML config"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
):
    """Report malformed assertion phrases without running any test."""
    from assertthat.config import AssertThatConfig, load_config
    from assertthat.scanner import iter_python_files, scan_file
    from assertthat.verbose import setup_logger, teardown_logger

    settings = AssertThatConfig()
    if config is not None:
        config_path = Path(config)
        if not config_path.exists():
            typer.echo(f"Error: config file not found: {config}", err=True)
            raise typer.Exit(1)
        try:
            settings = load_config(config_path)
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

    targets = [Path(p) for p in paths]
    missing = [str(p) for p in targets if not p.exists()]
    if missing:
        typer.echo(f"Error: path not found: {', '.join(missing)}", err=True)
        raise typer.Exit(1)

    logger = None
    if settings.log_file:
        logger = setup_logger(
            Path(settings.log_file),
            verbose=verbose or settings.verbose,
            logger_name="assertthat_cli",
        )

    try:
        files = iter_python_files(targets)
        problems = []
        for path in files:
            problems.extend(scan_file(path, logger=logger))
    finally:
        if logger is not None:
            teardown_logger(logger)

    for problem in problems:
        typer.echo(problem.format())

    if verbose:
        typer.echo(f"Checked {len(files)} file(s)")

    if problems:
        typer.echo(f"Found {len(problems)} malformed phrase(s)")
        raise typer.Exit(1)


@app.command()
def explain(
    phrase: str = typer.Argument(help="Phrase to translate, e.g. 'has len == 2'"),
):
    """Show how a phrase is translated."""
    from assertthat.assertions.base import MalformedPhrase
    from assertthat.phrase import parse_phrase

    try:
        parsed = parse_phrase(phrase)
    except MalformedPhrase as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"{type(parsed).__name__}: {parsed.describe()}")
    for key, value in parsed.model_dump().items():
        if key == "op":
            shown = value.value
        elif key in ("kind", "name"):
            shown = value
        else:
            shown = repr(value)
        typer.echo(f"  {key}: {shown}")


@app.command()
def schema(
    out: str | None = typer.Option(
        None, help="Write the JSON Schema to this path instead of stdout"
    ),
):
    """Generate the JSON Schema for the assertthat config file."""
    from assertthat.schema import render_json_schema, write_json_schema

    if out is None:
        typer.echo(render_json_schema(), nl=False)
        return

    out_path = Path(out)
    write_json_schema(out_path)
    typer.echo(f"Wrote schema: {out_path}")
