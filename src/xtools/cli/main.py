"""xTools CLI - serial terminal command-line interface."""

from __future__ import annotations

import json

import click

from xtools.utils.logging import setup_logging


@click.group(invoke_without_command=True)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.version_option(package_name="xtools")
@click.pass_context
def cli(ctx: click.Context, debug: bool, json_output: bool) -> None:
    """xTools - cross-platform serial terminal.

    Without a subcommand, starts the interactive REPL.
    """
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["json_output"] = json_output
    setup_logging(level="DEBUG" if debug else "WARNING", json_output=json_output)
    if ctx.invoked_subcommand is None:
        ctx.invoke(repl)


@cli.command()
@click.option("--no-rx", is_flag=True, help="Do not print received data in the background")
def repl(no_rx: bool) -> None:
    """Start the interactive serial REPL."""
    from xtools.cli.repl import Repl
    from xtools.context import AppContext

    context = AppContext(keep_log=False)
    Repl(context, live_rx=not no_rx).run()


@cli.command()
@click.pass_context
def ports(ctx: click.Context) -> None:
    """List available serial ports."""
    from xtools.serial.ports import list_ports_or_warn

    found, warning = list_ports_or_warn()
    if warning:
        click.echo(f"WARNING: {warning}", err=True)

    if ctx.obj.get("json_output"):
        click.echo(json.dumps([p.model_dump() for p in found], indent=2))
        return
    if not found:
        click.echo("No serial ports found.")
        return
    click.echo("Available ports:")
    for i, p in enumerate(found, start=1):
        click.echo(f"  [{i}] {p.name} - {p.description}")


@cli.command("serial")
@click.option("--port", "-p", default=None, help="Serial port (e.g. COM3 or /dev/ttyUSB0)")
@click.option("--baud", "-b", type=int, default=115200, help="Baud rate (default: 115200)")
@click.option("--hex", "show_hex", is_flag=True, help="Print received data as hex")
@click.option("--interval", type=int, default=50, help="Polling interval in ms")
def serial_monitor(port: str | None, baud: int, show_hex: bool, interval: int) -> None:
    """Connect to a port and print received data until Ctrl+C."""
    import time

    from xtools.context import AppContext
    from xtools.exceptions import XToolsError
    from xtools.serial.ports import list_ports_or_warn

    found, warning = list_ports_or_warn()
    if warning:
        click.echo(f"WARNING: {warning}", err=True)
    if found:
        click.echo("Available ports:")
        for i, p in enumerate(found, start=1):
            click.echo(f"  [{i}] {p.name} - {p.description}")
        click.echo()

    if port is None:
        if not found:
            click.echo("No serial ports found.")
            return
        port = click.prompt("Port name", default=found[0].name)

    context = AppContext(keep_log=False)
    try:
        context.connect(port, baud)
    except XToolsError as exc:
        click.echo(f"ERROR: {exc}")
        raise SystemExit(1) from exc

    click.echo(f"Connected to {port} @ {baud} bps. Press Ctrl+C to quit.\n")
    try:
        while True:
            try:
                entries = context.read_available()
            except XToolsError as exc:
                click.echo(f"ERROR: {exc}")
                break
            for entry in entries:
                body = entry.hex if show_hex else entry.text.rstrip("\r\n")
                click.echo(f"[{entry.time_str}] RX: {body}")
            time.sleep(interval / 1000)
    except KeyboardInterrupt:
        pass
    finally:
        context.shutdown()
        click.echo("\nDisconnected.")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", type=int, default=8000, help="HTTP port")
@click.option("--no-ui", is_flag=True, help="API only, no web dashboard")
def serve(host: str, port: int, no_ui: bool) -> None:
    """Start the web server (API + dashboard)."""
    import uvicorn
    from xtools.api.app import create_app

    app = create_app(enable_ui=not no_ui)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    cli()
