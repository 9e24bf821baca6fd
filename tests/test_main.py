"""
Tests for the command-line entry point.
"""

from unittest.mock import patch

import pytest

from gitlab_graph.main import build_parser, main
from gitlab_graph.storage import (
    GITLAB_ACCESS_TOKEN_KEY,
    GITLAB_URL_KEY,
    MemorySecretStore,
    MissingCredentialsError,
)


@pytest.fixture
def empty_store():
    store = MemorySecretStore()
    with patch("gitlab_graph.main.SQLiteSecretStore", return_value=store):
        with patch("gitlab_graph.config.get_env_credentials", return_value=(None, None)):
            yield store


@pytest.fixture
def configured_store(empty_store):
    empty_store.set(GITLAB_URL_KEY, "https://gitlab.example.com")
    empty_store.set(GITLAB_ACCESS_TOKEN_KEY, "glpat-abc")
    return empty_store


class TestParser:
    def test_show_defaults_to_medium(self):
        args = build_parser().parse_args(["show"])

        assert args.command == "show"
        assert args.family == "medium"

    def test_no_command(self):
        args = build_parser().parse_args([])

        assert args.command is None


class TestMain:
    """Tests for the main function."""

    def test_about(self, capsys):
        assert main(["about"]) == 0

        assert "GitLab Contribution Graph" in capsys.readouterr().out

    def test_invalid_configuration(self, capsys):
        with patch("gitlab_graph.config.TIMEOUT", "soon"):
            assert main(["about"]) == 1

        assert "Configuration Error" in capsys.readouterr().out

    def test_show_large_family_prints_error(self, configured_store, capsys):
        with patch("gitlab_graph.widget.default_client_factory") as mock_factory:
            assert main(["show", "--family", "large"]) == 1

        mock_factory.assert_not_called()
        assert "only supports small and medium" in capsys.readouterr().out

    def test_show_without_credentials(self, empty_store, capsys):
        assert main(["show"]) == 1

        assert "Error: Credentials are not provided." in capsys.readouterr().out

    @patch("gitlab_graph.main.run_widget", return_value=(True, "graph"))
    def test_show_success(self, mock_run, configured_store, capsys):
        assert main(["show", "--family", "small"]) == 0

        assert mock_run.call_args[0][0] == "small"
        assert "graph" in capsys.readouterr().out

    @patch("gitlab_graph.main.show_main_menu")
    @patch("gitlab_graph.main.show_credentials_dialog")
    def test_no_command_with_credentials_shows_menu(self, mock_dialog, mock_menu, configured_store):
        assert main([]) == 0

        mock_menu.assert_called_once_with(configured_store)
        mock_dialog.assert_not_called()

    @patch("gitlab_graph.main.show_main_menu")
    @patch("gitlab_graph.main.show_credentials_dialog")
    def test_no_command_without_credentials_shows_dialog(self, mock_dialog, mock_menu, empty_store):
        assert main([]) == 0

        mock_dialog.assert_called_once_with(empty_store)
        mock_menu.assert_not_called()

    @patch("gitlab_graph.main.show_credentials_dialog", side_effect=MissingCredentialsError())
    def test_cancelled_dialog_prints_error(self, mock_dialog, empty_store, capsys):
        assert main(["credentials"]) == 1

        assert "Error: Credentials are not provided." in capsys.readouterr().out

    @patch("gitlab_graph.main.show_credentials_removal_dialog")
    def test_remove_credentials(self, mock_removal, configured_store):
        assert main(["remove-credentials"]) == 0

        mock_removal.assert_called_once_with(configured_store)

    @patch("gitlab_graph.main.show_main_menu", side_effect=KeyboardInterrupt)
    def test_interrupt_exits_cleanly(self, mock_menu, configured_store):
        assert main([]) == 1

    def test_seeds_store_from_environment(self):
        store = MemorySecretStore()
        with patch("gitlab_graph.main.SQLiteSecretStore", return_value=store):
            with patch(
                "gitlab_graph.config.get_env_credentials",
                return_value=("https://gitlab.example.com", "glpat-abc"),
            ):
                with patch("gitlab_graph.main.run_widget", return_value=(True, "graph")):
                    main(["show"])

        assert store.get(GITLAB_ACCESS_TOKEN_KEY) == "glpat-abc"


class TestServe:
    """Tests for the serve command."""

    def test_serve_seeds_store_for_the_web_app(self, tmp_path):
        from fastapi.testclient import TestClient

        from gitlab_graph.app import app

        with patch("gitlab_graph.config.DB_PATH", str(tmp_path / "secrets.db")):
            with patch(
                "gitlab_graph.config.get_env_credentials",
                return_value=("https://gitlab.acme.io", "glpat-abc"),
            ):
                with patch("uvicorn.run") as mock_run:
                    assert main(["serve"]) == 0

            response = TestClient(app).get("/api/credentials/status")

        mock_run.assert_called_once()
        assert response.json() == {"configured": True, "url": "https://gitlab.acme.io"}
