"""Typer application and CLI entry point for errors_ai.

This module wires together the top-level Typer application and registers
the built-in commands (``login``, ``logout``, ``whoami``, ``version``,
``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~errors_ai.exceptions.ErrorsAIError` instances exit with their
mapped code; any other exception is written to a crash log under the data
directory.

See Also:
    :mod:`errors_ai.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import platform
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer
from rich.logging import RichHandler

from errors_ai import __version__
from errors_ai.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="errors-ai",
    help="AI-powered code analysis CLI for Errors.AI.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"errors-ai {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route package loggers to stderr through Rich when ``--verbose`` is set."""
    from errors_ai.output import get_output

    package_logger = logging.getLogger("errors_ai")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    if not verbose:
        package_logger.setLevel(logging.WARNING)
        return
    handler = RichHandler(
        console=get_output().stderr_console,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~errors_ai.output.OutputManager` and
    the package logging configuration from CLI flags.
    """
    from errors_ai.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )
    _configure_logging(verbose)


@app.command("version")
def version_command() -> None:
    """Show CLI, Python, and platform versions."""
    from errors_ai.output import print_fields

    print_fields(
        [
            ("errors-ai", __version__),
            ("Python", platform.python_version()),
            ("Platform", f"{sys.platform}-{platform.machine()}"),
        ]
    )


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from errors_ai.commands.auth import login, logout, whoami  # noqa: E402
from errors_ai.commands.config import config_app  # noqa: E402

app.command("login")(login)
app.command("logout")(logout)
app.command("whoami")(whoami)
app.add_typer(config_app, name="config", help="Manage login defaults.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from errors_ai.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``errors-ai`` console script.

    Unhandled :class:`~errors_ai.exceptions.ErrorsAIError` instances cause
    a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from errors_ai.exceptions import ErrorsAIError
        from errors_ai.output import error

        if isinstance(exc, ErrorsAIError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
