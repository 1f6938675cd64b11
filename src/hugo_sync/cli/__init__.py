from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..config import AppConfig, ConfigError, dump_config, load_config
from ..core import SyncError, SyncService
from ..host import LocalVaultHost
from ..messages import get_messages
from ..settings import get_settings
from ..utils import iter_markdown_files

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(help="Sync vault notes into a Hugo site")


def _load_config(path: Path | None) -> AppConfig:
    settings = get_settings()
    try:
        config = load_config(path or settings.config_path)
    except ConfigError as exc:
        err_console.print(f"[red]Invalid configuration[/red]: {exc}")
        raise typer.Exit(2) from exc
    if settings.enable_local_api is not None:
        config.runtime.enable_local_api = settings.enable_local_api
    return config


def _notify(message: str, duration_ms: int | None) -> None:
    console.print(message, markup=False, highlight=False)


@app.command(help=get_messages("en").command_name)
def sync(
    paths: list[Path] | None = typer.Argument(None, help="Notes to sync, relative to the vault"),
    vault: Path | None = typer.Option(None, "--vault", help="Vault directory"),
    active: Path | None = typer.Option(None, "--active", help="Note to sync when no paths are given"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    vault_dir = vault or cfg.vault.path
    requested = [path if path.is_absolute() else vault_dir / path for path in paths or []]
    selected = list(iter_markdown_files(requested))
    host = LocalVaultHost(vault_dir, selected=selected, active=active, notifier=_notify)
    service = SyncService(cfg, host)
    batch_result = service.sync_selected()
    if batch_result.runs:
        table = Table(title="Synced notes")
        table.add_column("Note")
        table.add_column("Output")
        table.add_column("Images")
        table.add_column("Warnings")
        for result in batch_result.runs:
            table.add_row(
                result.document.name,
                str(result.output_path),
                f"{len(result.copied)} copied, {len(result.skipped)} skipped",
                ", ".join(result.warnings) or "-",
            )
        console.print(table)
    if batch_result.summary.failures:
        raise typer.Exit(1)


@app.command()
def convert(
    file: Path,
    vault: Path | None = typer.Option(None, "--vault", help="Vault directory"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Print the converted note without writing anything."""

    cfg = _load_config(config)
    host = LocalVaultHost(vault or cfg.vault.path)
    service = SyncService(cfg, host)
    try:
        result = service.convert_document(host.document_for(file))
    except SyncError as exc:
        err_console.print(f"[red]Conversion failed[/red]: {exc.code} - {exc}")
        raise typer.Exit(1) from exc
    typer.echo(result.text, nl=False)
    if result.images:
        table = Table(title="Images to copy")
        table.add_column("Source")
        table.add_column("Destination")
        for image in result.images:
            table.add_row(str(image.source), str(image.destination))
        err_console.print(table)
    for warning in result.warnings:
        err_console.print(f"[yellow]{warning}[/yellow]")


@app.command("config")
def show_config(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    typer.echo(dump_config(_load_config(config)))


@app.command()
def serve(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Run the local HTTP API."""

    import uvicorn

    from ..api import create_app

    cfg = _load_config(config)
    try:
        api = create_app(cfg)
    except RuntimeError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    uvicorn.run(api, host=cfg.api.host, port=cfg.api.port)


if __name__ == "__main__":
    app()
