"""Helpers shared by the console commands: DSN and settings resolution, notifications."""

import logging
import os

import click
import dotenv
from pydantic import ValidationError as SettingsError

from config import Settings, get_settings
from pgmq_admin.logging_config import configure_logging


class NotificationError(click.ClickException):
    """A failed action, shown as a red notification; exits with status 1."""

    def show(self, file=None) -> None:
        click.secho(f"Error: {self.format_message()}", err=True, color=True, fg="red")


def show_success(message: str) -> None:
    click.secho(message, color=True, fg="green")


def show_warning(message: str) -> None:
    click.secho(message, err=True, color=True, fg="yellow")


def show_info(message: str) -> None:
    click.echo(message)


def get_dsn(dsn: str | None) -> str:
    """Return the DSN argument, else PGMQ_DSN (loading .env if present)."""
    if not dsn:
        if os.path.exists(".env"):
            dotenv.load_dotenv()
        dsn = os.getenv("PGMQ_DSN", None)
    if not dsn:
        raise click.ClickException("No DSN provided and PGMQ_DSN environment variable is not set")
    return dsn


def load_settings(verbose: bool = False) -> Settings:
    """Load settings, turning validation failures into a CLI error; configure logging when verbose."""
    try:
        settings = get_settings()
    except SettingsError as err:
        raise click.ClickException(f"Invalid settings: {err}") from err
    if verbose:
        configure_logging(settings.log_level, settings.log_json)
        logging.getLogger(__name__).debug("Logging configured for %s", settings.app_name)
    return settings
