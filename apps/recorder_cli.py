from __future__ import annotations

import json
import signal
import threading
from pathlib import Path
from typing import Optional

import typer

from config.paths import list_bags, verify_writeable
from core.errors import ConfigError, SinkCreationError
from recording.node import BagRecorderNode
from sdk.config import AppConfig, load_config
from sdk.logging import configure_logging


app = typer.Typer(add_completion=False, no_args_is_help=True)

ConfigOption = typer.Option(None, "--config", "-c", help="JSON parameter file")


def _load(config: Optional[Path]) -> AppConfig:
    try:
        return load_config(config)
    except ConfigError as exc:
        typer.echo(f"[bag_recorder] invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2)


@app.command()
def run(
    config: Optional[Path] = ConfigOption,
    autostart: bool = typer.Option(True, help="Open a bag immediately instead of waiting for /bag_control"),
    http: bool = typer.Option(False, help="Serve the HTTP control API"),
    port: Optional[int] = typer.Option(None, help="HTTP port (overrides config)"),
    log_level: Optional[str] = typer.Option(None, help="Log level (overrides config)"),
) -> None:
    """Run the recorder until SIGINT/SIGTERM."""

    cfg = _load(config)
    configure_logging(log_level or cfg.log_level, log_file=cfg.log_file)

    try:
        verify_writeable(cfg.params.data_folder)
    except OSError as exc:
        typer.echo(f"[bag_recorder] data folder unusable: {exc}", err=True)
        raise typer.Exit(code=1)

    node = BagRecorderNode(cfg)

    stop_event = threading.Event()

    def _stop(*_object: object) -> None:
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    server = None
    try:
        try:
            node.start(autostart=autostart)
        except SinkCreationError as exc:
            # stays idle; the next enable on the control topic retries
            typer.echo(f"[bag_recorder] {exc}", err=True)
        if http:
            from sdk.server import serve_in_background

            server = serve_in_background(node, cfg.http_host, port or cfg.http_port)

        typer.echo(f"[bag_recorder] listening on {cfg.control_topic}, state={node.controller.state.value}")
        typer.echo("Press Ctrl+C to stop.")
        while not stop_event.is_set():
            stop_event.wait(0.25)
    finally:
        if server is not None:
            server.should_exit = True
        node.shutdown()


@app.command()
def bags(
    config: Optional[Path] = ConfigOption,
    limit: int = typer.Option(20, help="Show at most this many bags"),
) -> None:
    """List bag directories in the data folder, newest first."""

    cfg = _load(config)
    found = list_bags(cfg.params.data_folder)
    if not found:
        typer.echo(f"no bags in {cfg.params.data_folder}")
        return
    for bag in found[:limit]:
        typer.echo(str(bag))


@app.command("show-config")
def show_config(config: Optional[Path] = ConfigOption) -> None:
    """Print the effective configuration after file and env overrides."""

    cfg = _load(config)
    typer.echo(json.dumps(cfg.model_dump(by_alias=True), indent=2))


if __name__ == "__main__":
    app()
