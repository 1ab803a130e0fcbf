"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import click
import typer
from typer.core import TyperGroup

from adbmux.bridge.adb import AdbBridge
from adbmux.core.config import Config, load_config
from adbmux.core.dispatcher import MAX_RECORD_SECONDS, Dispatcher
from adbmux.core.errors import AdbmuxError, KeywordSyntaxError, NoCandidatesError
from adbmux.core.model import DispatchReport, KeywordExpression
from adbmux.core.selector import Selector

PASSTHROUGH_COMMAND = "passthrough"
KEYWORD_HELP = "Package name for an exact match, or '*keyword*' (quoted) for a contains match"


class PassthroughGroup(TyperGroup):
    """Route unrecognized subcommands and adb global flags to the raw adb pass-through."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        takes_value: dict[str, bool] = {}
        for param in self.get_params(ctx):
            if isinstance(param, click.Option):
                for opt in (*param.opts, *param.secondary_opts):
                    takes_value[opt] = not param.is_flag and not param.count

        position = 0
        while position < len(args):
            token = args[position]
            name = token.split("=", 1)[0]
            if name not in takes_value:
                break
            position += 2 if takes_value[name] and "=" not in token else 1

        if position < len(args) and args[position].startswith("-"):
            args = [*args[:position], PASSTHROUGH_COMMAND, *args[position:]]
        return super().parse_args(ctx, args)

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        if args and self.get_command(ctx, args[0]) is None:
            args = [PASSTHROUGH_COMMAND, *args]
        return super().resolve_command(ctx, args)


app = typer.Typer(
    cls=PassthroughGroup,
    no_args_is_help=True,
    help="Run adb commands across one or many attached devices. "
    "Unrecognized commands are forwarded to adb as they are.",
)


def _parse_keyword(value: str) -> KeywordExpression:
    try:
        return KeywordExpression.parse(value)
    except KeywordSyntaxError as exc:
        raise typer.BadParameter(str(exc)) from None


def _build_dispatcher(config: Config) -> Dispatcher:
    return Dispatcher(AdbBridge(config.adb_path), Selector(), config=config)


def _run(ctx: typer.Context, operation: Callable[[Dispatcher], DispatchReport]) -> None:
    try:
        dispatcher = _build_dispatcher(ctx.obj or Config())
        report = operation(dispatcher)
    except NoCandidatesError as exc:
        typer.echo(str(exc))
        return
    except AdbmuxError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    if not report.ok:
        failed = ", ".join(target.describe() for target in report.failed)
        typer.echo(f"Failed on: {failed}", err=True)
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", help="Path to config.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = load_config(config)
    except AdbmuxError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("setting")
def open_settings(ctx: typer.Context) -> None:
    """Open the system settings app."""
    _run(ctx, lambda dispatcher: dispatcher.open_settings())


@app.command("launcher")
def open_launcher(ctx: typer.Context) -> None:
    """Go to the home launcher."""
    _run(ctx, lambda dispatcher: dispatcher.open_launcher())


@app.command("packages")
def list_packages(ctx: typer.Context) -> None:
    """List all installed packages."""
    _run(ctx, lambda dispatcher: dispatcher.list_packages())


@app.command("app-info")
def app_info(
    ctx: typer.Context,
    keyword: KeywordExpression = typer.Argument(..., parser=_parse_keyword, metavar="KEYWORD", help=KEYWORD_HELP),
) -> None:
    """Show package details (dumpsys package)."""
    _run(ctx, lambda dispatcher: dispatcher.package_action("app-info", keyword))


@app.command("screenshot")
def screenshot(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Local base path; saved as <path>_<serial>.png"),
) -> None:
    """Take a screenshot and save it to a local file."""
    _run(ctx, lambda dispatcher: dispatcher.screenshot(path))


@app.command("screenrecord")
def screenrecord(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Local base path; saved as <path>_<serial>.mp4"),
    duration: int | None = typer.Option(
        None,
        "-duration",
        "--duration",
        min=1,
        max=MAX_RECORD_SECONDS,
        help=f"Recording length in seconds, up to {MAX_RECORD_SECONDS}",
    ),
) -> None:
    """Record the screen and pull the video to a local file."""
    _run(ctx, lambda dispatcher: dispatcher.screenrecord(path, duration))


@app.command("uninstall")
def uninstall(
    ctx: typer.Context,
    keyword: KeywordExpression = typer.Argument(..., parser=_parse_keyword, metavar="KEYWORD", help=KEYWORD_HELP),
) -> None:
    """Uninstall matching app(s)."""
    _run(ctx, lambda dispatcher: dispatcher.package_action("uninstall", keyword))


@app.command("clear-data")
def clear_data(
    ctx: typer.Context,
    keyword: KeywordExpression = typer.Argument(..., parser=_parse_keyword, metavar="KEYWORD", help=KEYWORD_HELP),
) -> None:
    """Clear app data for matching app(s)."""
    _run(ctx, lambda dispatcher: dispatcher.package_action("clear-data", keyword))


@app.command("force-stop")
def force_stop(
    ctx: typer.Context,
    keyword: KeywordExpression = typer.Argument(..., parser=_parse_keyword, metavar="KEYWORD", help=KEYWORD_HELP),
) -> None:
    """Force stop matching app(s)."""
    _run(ctx, lambda dispatcher: dispatcher.package_action("force-stop", keyword))


@app.command("start")
def start(
    ctx: typer.Context,
    keyword: KeywordExpression = typer.Argument(..., parser=_parse_keyword, metavar="KEYWORD", help=KEYWORD_HELP),
) -> None:
    """Launch a matching app."""
    _run(ctx, lambda dispatcher: dispatcher.package_action("start", keyword))


@app.command("mirror")
def mirror(ctx: typer.Context) -> None:
    """Mirror a device screen with scrcpy (requires scrcpy_dir in the config file)."""
    _run(ctx, lambda dispatcher: dispatcher.mirror())


@app.command(
    PASSTHROUGH_COMMAND,
    hidden=True,
    add_help_option=False,
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def passthrough(
    ctx: typer.Context,
    tokens: list[str] = typer.Argument(..., help="adb verb and its arguments"),
) -> None:
    """Forward an adb command to the selected device(s)."""
    _run(ctx, lambda dispatcher: dispatcher.passthrough(tokens))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
