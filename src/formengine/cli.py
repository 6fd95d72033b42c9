from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from formengine.client import SubmissionClient
from formengine.config import Settings
from formengine.errors import SubmissionError
from formengine.schema import parse_form_config, unwrap_form_data
from formengine.storage import init_storage
from formengine.utils import loads_json, new_ulid

cli = typer.Typer(add_completion=False)


def run_server(host: str | None, port: int | None) -> None:
    import uvicorn

    from formengine.app import create_app

    settings = Settings()
    resolved_host = host or settings.host
    resolved_port = port if port is not None else settings.port
    uvicorn.run(
        create_app(settings),
        host=resolved_host,
        port=resolved_port,
        log_level=settings.log_level,
    )


def _read_document(path: Path) -> object:
    try:
        return loads_json(path.read_bytes())
    except ValueError as exc:
        typer.echo(f"{path}: could not parse JSON ({exc})", err=True)
        raise typer.Exit(code=1)


@cli.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Address to bind"),
    port: int | None = typer.Option(None, help="Port to bind"),
) -> None:
    ctx.obj = {"host": host, "port": port}
    if ctx.invoked_subcommand is None:
        run_server(host, port)


@cli.command()
def run(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Address to bind"),
    port: int | None = typer.Option(None, help="Port to bind"),
) -> None:
    base = ctx.obj or {}
    resolved_host = host or base.get("host")
    resolved_port = port if port is not None else base.get("port")
    run_server(resolved_host, resolved_port)


@cli.command()
def check(path: Path = typer.Argument(..., exists=True, dir_okay=False)) -> None:
    """Validate a FormConfig or FormFieldData JSON file."""
    _, _, _, raw_config = unwrap_form_data(_read_document(path))
    config, errors = parse_form_config(raw_config)
    if config is None or errors:
        for error in errors:
            typer.echo(error, err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{config['name']}: {len(config['fields'])} fields OK")


@cli.command("import")
def import_form(
    path: Path = typer.Argument(..., exists=True, dir_okay=False),
    form_id: str | None = typer.Option(None, "--form-id", help="Override the stored form id"),
) -> None:
    """Validate a form file and store it."""
    doc_id, name, description, raw_config = unwrap_form_data(_read_document(path))
    config, errors = parse_form_config(raw_config)
    if config is None or errors:
        for error in errors:
            typer.echo(error, err=True)
        raise typer.Exit(code=1)
    resolved_id = form_id or doc_id or new_ulid()
    storage = init_storage(Settings())
    storage.forms.save_form(
        {
            "form_id": resolved_id,
            "form_name": name or config["name"],
            "form_description": description or config["description"],
            "form_config": raw_config,
        }
    )
    typer.echo(resolved_id)


@cli.command()
def health() -> None:
    """Query the submission backend's health endpoint."""
    settings = Settings()
    client = SubmissionClient(settings.api_url, timeout=settings.request_timeout)
    try:
        status = asyncio.run(client.check_health())
    except SubmissionError as exc:
        typer.echo(exc.message, err=True)
        raise typer.Exit(code=1)
    typer.echo(status)
