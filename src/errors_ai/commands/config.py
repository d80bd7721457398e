"""Config commands -- view and modify login defaults.

Provides the ``errors-ai config`` sub-command group for reading, updating,
and resetting the user's configuration file
(:class:`~errors_ai.models.GlobalConfig`). The stored values are the
lowest-precedence layer of :func:`~errors_ai.config.resolve_login_settings`.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from errors_ai.config import get_config_dir, load_global_config, save_global_config
from errors_ai.exceptions import ConfigError
from errors_ai.models import GlobalConfig
from errors_ai.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show current configuration.

    Example::

        errors-ai config show
        errors-ai --json config show
    """
    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key: base_url, port, timeout_ms, no_browser."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the existing field's type (bool, int, or str)
    and the result is validated against
    :class:`~errors_ai.models.GlobalConfig` before saving.

    Raises:
        typer.Exit: With code 2 if the key is unknown, the value cannot be
            coerced, or validation fails.

    Example::

        errors-ai config set port 9999
        errors-ai config set no_browser true
    """
    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = config.model_dump(mode="json")

    if key not in GlobalConfig.model_fields:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = data.get(key)
    if isinstance(current, bool):
        coerced: object = value.lower() in ("true", "1", "yes", "on")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    else:
        coerced = value

    data[key] = coerced
    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is given.
    """
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
