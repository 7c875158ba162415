"""draftreel init — write a config file and storage layout."""

from __future__ import annotations

from pathlib import Path

import click

from draftreel.models.config import CONFIG_FILENAME, DraftConfig, Settings, write_settings
from draftreel.utils.progress import log_error, log_success


@click.command()
@click.option(
    "--mode",
    default="camera",
    type=click.Choice(["camera", "upload"]),
    help="Draft namespace for this workspace",
)
@click.option("--budget", default=60.0, type=float, help="Recording ceiling in seconds")
@click.option("--autosave-delay", default=1000, type=int, help="Auto-save quiet period (ms)")
@click.option(
    "--output", "-o",
    default=".",
    type=click.Path(file_okay=False),
    help="Workspace directory",
)
@click.option("--force", is_flag=True, help="Overwrite an existing config")
def init_cmd(mode: str, budget: float, autosave_delay: int, output: str, force: bool) -> None:
    """Create draftreel.yaml and the storage directories."""
    workspace = Path(output).resolve()
    workspace.mkdir(parents=True, exist_ok=True)
    config_path = workspace / CONFIG_FILENAME

    if config_path.exists() and not force:
        log_error(f"Config already exists: {config_path} (use --force to overwrite)")
        raise SystemExit(1)

    settings = Settings(drafts=DraftConfig(
        mode=mode,
        default_duration_budget=budget,
        autosave_delay_ms=autosave_delay,
    ))
    settings.storage.media_path(workspace).mkdir(parents=True, exist_ok=True)
    settings.storage.metadata_path(workspace).mkdir(parents=True, exist_ok=True)
    write_settings(config_path, settings)

    log_success(f"Workspace initialized: {workspace}")
    click.echo(f"Config: {config_path}")
