"""Tests for the shared CLI helpers."""

from unittest import TestCase
from unittest.mock import patch

import click
from click.testing import CliRunner

from pgmq_admin.cli.common import NotificationError, get_dsn, load_settings


class TestGetDsn(TestCase):
    def test_argument_wins(self):
        with patch("pgmq_admin.cli.common.os.getenv") as mock_getenv:
            self.assertEqual(get_dsn("postgres://localhost/db"), "postgres://localhost/db")
        mock_getenv.assert_not_called()

    @patch("pgmq_admin.cli.common.os.getenv", return_value="postgres://env-host/db")
    def test_falls_back_to_env(self, mock_getenv):
        self.assertEqual(get_dsn(None), "postgres://env-host/db")
        mock_getenv.assert_called_once_with("PGMQ_DSN", None)

    @patch("pgmq_admin.cli.common.os.getenv", return_value=None)
    def test_missing_everywhere(self, mock_getenv):
        with self.assertRaises(click.ClickException) as ctx:
            get_dsn("")
        self.assertIn("No DSN provided", ctx.exception.format_message())


class TestLoadSettings(TestCase):
    @patch.dict("os.environ", {"POOL_SIZE": "0"})
    def test_invalid_settings_become_click_errors(self):
        with self.assertRaises(click.ClickException) as ctx:
            load_settings()
        self.assertIn("Invalid settings", ctx.exception.format_message())

    @patch.dict("os.environ", {"POOL_SIZE": "4", "MAX_PAGE_SIZE": "50"})
    def test_reads_environment(self):
        settings = load_settings()
        self.assertEqual(settings.pool_size, 4)
        self.assertEqual(settings.max_page_size, 50)


class TestNotificationError(TestCase):
    def test_exit_code_and_message(self):
        @click.command()
        def fail():
            raise NotificationError("Queue orders could not be destroyed")

        result = CliRunner().invoke(fail)

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error: Queue orders could not be destroyed", result.output)
