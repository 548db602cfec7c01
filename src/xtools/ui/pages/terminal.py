"""Serial terminal page - connection settings, live traffic log, and send box."""

from __future__ import annotations

from nicegui import run, ui

from xtools.config import with_connection
from xtools.context import AppContext
from xtools.exceptions import DeviceError, PersistenceError, StateError, XToolsError
from xtools.serial.models import COMMON_BAUD_RATES, VALID_DATA_BITS, VALID_STOP_BITS, Parity
from xtools.serial.poller import POLL_INTERVAL_S
from xtools.serial.ports import list_ports_or_warn
from xtools.ui.components.status import connection_badge, set_connection_badge
from xtools.ui.layout import page_layout
from xtools.ui.theme import COLORS
from xtools.utils.logging import get_logger

logger = get_logger(__name__)

MAX_LOG_LINES = 5000


def terminal_page(ctx: AppContext) -> None:
    """Render the serial terminal page."""

    def content():
        settings = ctx.config.serial
        display = ctx.config.display
        state = {"rendered": 0, "faulted": False}

        # --- Connection settings ---
        with ui.card().classes("w-full p-4"):
            with ui.row().classes("w-full items-end gap-4 flex-wrap"):
                port_select = ui.select([], label="Port", value=None).classes("min-w-[220px]")
                ui.button(icon="refresh", on_click=lambda: refresh_ports()).props("flat")
                baud_options = sorted(set(COMMON_BAUD_RATES) | {settings.baud_rate})
                baud_select = ui.select(
                    baud_options, label="Baud", value=settings.baud_rate,
                ).classes("min-w-[120px]")
                custom_baud = ui.number(
                    "Custom baud", value=settings.custom_baud_rate or None, min=1, format="%d",
                ).classes("w-[130px]")
                data_bits = ui.select(list(VALID_DATA_BITS), label="Data", value=settings.data_bits)
                stop_bits = ui.select(list(VALID_STOP_BITS), label="Stop", value=settings.stop_bits)
                parity = ui.select(
                    [p.value for p in Parity], label="Parity", value=settings.parity.value,
                )
                connect_btn = ui.button("Connect", on_click=lambda: toggle_connection())
                badge = connection_badge()

        # --- Traffic log ---
        with ui.card().classes("w-full p-4"):
            with ui.row().classes("items-center gap-4"):
                show_ts = ui.switch("Timestamp", value=display.show_timestamp)
                show_hex = ui.switch("Hex", value=display.show_hex)
                ui.button("Clear", icon="delete", on_click=lambda: clear_log()).props("flat")
                log_path = ui.input("Save to", value="xtools-log.txt").classes("w-[260px]")
                ui.button("Save log", icon="save", on_click=lambda: save_log()).props("flat")
            log_view = ui.log(max_lines=MAX_LOG_LINES).classes("traffic-log w-full h-[420px]")
            log_view.style(f"font-size: {display.font_size}px")

        # --- Send box ---
        with ui.row().classes("w-full items-center gap-4"):
            payload = ui.input("Data").classes("flex-grow")
            hex_mode = ui.switch("Hex mode", value=settings.hex_mode)
            append_nl = ui.switch("Append newline", value=settings.append_newline)
            ui.button("Send", icon="send", on_click=lambda: send())
        payload.on("keydown.enter", lambda: send())

        def refresh_ports() -> None:
            ports, warning = list_ports_or_warn()
            if warning:
                ui.notify(f"Port scan failed: {warning}", type="warning")
            port_select.options = [p.name for p in ports]
            if port_select.value not in port_select.options:
                remembered = settings.port if settings.port in port_select.options else None
                port_select.value = remembered or (port_select.options[0] if port_select.options else None)
            port_select.update()

        def render_status() -> None:
            status = ctx.status()
            set_connection_badge(badge, status)
            connect_btn.text = "Disconnect" if status.connected else "Connect"

        def rerender() -> None:
            log_view.clear()
            state["rendered"] = 0
            render_new()

        def render_new() -> None:
            if ctx.traffic is None:
                return
            if len(ctx.traffic) < state["rendered"]:
                log_view.clear()
                state["rendered"] = 0
            for entry in ctx.traffic.since(state["rendered"]):
                log_view.push(
                    entry.format_line(show_ts.value, show_hex.value),
                    style=f"color: {COLORS[entry.direction.value]}",
                )
                state["rendered"] += 1

        async def toggle_connection() -> None:
            try:
                if ctx.status().connected:
                    await run.io_bound(ctx.disconnect)
                    ui.notify("Disconnected")
                else:
                    await connect()
            except XToolsError as exc:
                ui.notify(str(exc), type="negative")
            render_status()

        async def connect() -> None:
            if not port_select.value:
                ui.notify("Select a port first", type="warning")
                return
            baud = int(custom_baud.value) if custom_baud.value else int(baud_select.value)
            await run.io_bound(
                ctx.connect, port_select.value, baud,
                int(data_bits.value), int(stop_bits.value), parity.value,
            )
            state["faulted"] = False
            if ctx.traffic is not None:
                ctx.traffic.clear()
            rerender()
            ui.notify(f"Connected to {port_select.value} @ {baud} bps", type="positive")
            remember(port_select.value, baud)

        def remember(port: str, baud: int) -> None:
            updated = with_connection(ctx.config, port, baud)
            updated.serial.data_bits = int(data_bits.value)
            updated.serial.stop_bits = int(stop_bits.value)
            updated.serial.parity = Parity(parity.value)
            updated.serial.hex_mode = bool(hex_mode.value)
            updated.serial.append_newline = bool(append_nl.value)
            updated.display.show_timestamp = bool(show_ts.value)
            updated.display.show_hex = bool(show_hex.value)
            try:
                ctx.save_config(updated)
            except PersistenceError as exc:
                logger.warning("config_save_failed", error=str(exc))
                ui.notify(f"Settings not saved: {exc}", type="warning")

        async def send() -> None:
            text = payload.value or ""
            if not text:
                return
            if not hex_mode.value and append_nl.value:
                text += ctx.config.serial.newline_type.chars
            try:
                await run.io_bound(ctx.send, text, bool(hex_mode.value))
            except XToolsError as exc:
                ui.notify(str(exc), type="negative")
                return
            payload.value = ""
            render_new()

        def clear_log() -> None:
            if ctx.traffic is not None:
                ctx.traffic.clear()
            rerender()

        async def save_log() -> None:
            content = ctx.traffic.render(show_ts.value, show_hex.value) if ctx.traffic else ""
            try:
                path = await run.io_bound(ctx.save_log, log_path.value, content)
            except PersistenceError as exc:
                ui.notify(str(exc), type="negative")
                return
            ui.notify(f"Log saved to {path}", type="positive")

        async def poll() -> None:
            if not ctx.status().connected:
                render_status()
                return
            try:
                await run.io_bound(ctx.read_available)
            except StateError:
                pass
            except DeviceError as exc:
                if not state["faulted"]:
                    state["faulted"] = True
                    ui.notify(f"{exc}. Disconnect if the device was removed.", type="negative")
            else:
                state["faulted"] = False
            render_new()
            render_status()

        show_ts.on_value_change(lambda _: rerender())
        show_hex.on_value_change(lambda _: rerender())

        refresh_ports()
        render_status()
        render_new()
        if ctx.config_warning:
            ui.notify(f"{ctx.config_warning} (using defaults)", type="warning")
        ui.timer(POLL_INTERVAL_S, poll)

    page_layout("Serial Terminal", content)
