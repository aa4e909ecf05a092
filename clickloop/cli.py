"""
Command-line interface for clickloop.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from clickloop import __version__
from clickloop.config import ClickloopConfig
from clickloop.engine import ClickEngine
from clickloop.errors import ClickloopError
from clickloop.models import RecordingState

COMMANDS_HELP = """Commands:
  r            toggle click recording
  i <seconds>  set the playback interval
  s            start autoclicking
  x            stop autoclicking
  l            list recorded locations
  q            exit"""


def _build_engine(config: ClickloopConfig) -> ClickEngine:
    return ClickEngine(config=config)


@click.group()
@click.version_option(version=__version__)
def main():
    """clickloop - Record click locations and replay them on an interval."""
    pass


@main.command()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file"
)
@click.option(
    "--interval", "-n",
    type=str,
    default=None,
    help="Seconds between clicks (default 0.2)"
)
@click.option(
    "--stop-key", "-k",
    type=str,
    default=None,
    help="Emergency stop key (default esc)"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
def run(
    config: Optional[Path],
    interval: Optional[str],
    stop_key: Optional[str],
    verbose: bool
):
    """
    Record click locations and autoclick them from an interactive console.

    This will actually move your mouse cursor and click. Press the emergency
    stop key anywhere to halt playback.
    """
    try:
        clicker_config = ClickloopConfig.from_file(config) if config else ClickloopConfig()
    except ValidationError as e:
        click.echo(f"❌ Invalid configuration in {config}: {e}", err=True)
        raise SystemExit(1)
    if stop_key:
        clicker_config.stop_key = stop_key
    verbose = verbose or clicker_config.verbose

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        engine = _build_engine(clicker_config)
    except ClickloopError as e:
        click.echo(f"❌ {e}", err=True)
        raise SystemExit(1)
    if interval is not None and not engine.set_interval(interval):
        click.echo(f"⚠️  Ignoring invalid interval {interval!r}, using {engine.interval.value}s", err=True)

    click.echo("🖱️  Multi-Click Autoclicker")
    click.echo(COMMANDS_HELP)
    click.echo(f"   Press '{engine.emergency_stop.stop_key}' anywhere to stop autoclicking.\n")

    with engine:
        stdin = click.get_text_stream("stdin")
        for line in stdin:
            if not _handle_command(engine, line.strip()):
                break

    click.echo("👋 Exiting program.")


def _handle_command(engine: ClickEngine, line: str) -> bool:
    """Run one console command. Returns False when the operator asks to exit."""
    if not line:
        return True
    command, _, arg = line.partition(" ")
    command = command.lower()

    if command in ("q", "quit", "exit"):
        engine.exit()
        return False

    if command in ("r", "record"):
        state = engine.toggle_recording()
        if state == RecordingState.RECORDING:
            click.echo("🔴 Recording clicks. Click anywhere to record, 'r' again to finish.")
        else:
            for text in engine.display_lines():
                click.echo(f"   {text}")

    elif command in ("i", "interval"):
        if engine.set_interval(arg):
            click.echo(f"⏱️  Interval set to {engine.interval.value}s")
        else:
            click.echo(f"⚠️  Invalid interval {arg!r}, keeping {engine.interval.value}s", err=True)

    elif command in ("s", "start"):
        try:
            engine.start_playback()
        except ClickloopError as e:
            click.echo(f"❌ {e}", err=True)
        else:
            click.echo(f"▶️  Autoclicking {len(engine.points())} locations every {engine.interval.value}s")

    elif command in ("x", "stop"):
        engine.stop_playback()
        click.echo("⏹  Autoclicker stopped.")

    elif command in ("l", "list"):
        for text in engine.display_lines():
            click.echo(f"   {text}")

    else:
        click.echo(f"Unknown command: {command}")
        click.echo(COMMANDS_HELP)

    return True


@main.command()
@click.argument("path", type=click.Path(path_type=Path))
def init_config(path: Path):
    """Write a default configuration file to PATH."""
    ClickloopConfig().to_file(path)
    click.echo(f"✅ Default configuration written to: {path}")


@main.command()
def check():
    """Check if OS input control and monitoring are available."""
    click.echo("🔍 Checking input dependencies...\n")

    # Check pyautogui
    try:
        import pyautogui
        click.echo("  ✅ pyautogui is available")
        screen_size = pyautogui.size()
        click.echo(f"     Screen size: {screen_size[0]}x{screen_size[1]}")
        pos = pyautogui.position()
        click.echo(f"     Mouse position: ({pos[0]}, {pos[1]})")
    except ImportError:
        click.echo("  ❌ pyautogui not installed")
        click.echo("     Install with: pip install pyautogui")
    except Exception as e:
        click.echo(f"  ⚠️  pyautogui error: {e}")

    # Check pynput
    try:
        from pynput import keyboard, mouse  # noqa: F401
        click.echo("  ✅ pynput is available (global click and key monitoring)")
    except ImportError:
        click.echo("  ❌ pynput not installed; recording and emergency stop need it")
        click.echo("     Install with: pip install pynput")
    except Exception as e:
        click.echo(f"  ⚠️  pynput error: {e}")

    click.echo("\n💡 Note: On macOS, grant Accessibility and Input Monitoring permissions")
    click.echo("   to your terminal app in System Settings > Privacy & Security.")


if __name__ == "__main__":
    main()
