"""
Tests for the interactive dialogs.
"""

from unittest.mock import patch

import pytest

from gitlab_graph.cli import (
    HELP_TEXT,
    about_text,
    prompt_choice,
    show_credentials_dialog,
    show_credentials_removal_dialog,
    show_main_menu,
)
from gitlab_graph.storage import (
    GITLAB_ACCESS_TOKEN_KEY,
    GITLAB_URL_KEY,
    MemorySecretStore,
    MissingCredentialsError,
    has_credentials,
)


@pytest.fixture
def store():
    return MemorySecretStore(
        {
            GITLAB_URL_KEY: "https://gitlab.example.com",
            GITLAB_ACCESS_TOKEN_KEY: "glpat-abc",
        }
    )


class TestPromptChoice:
    """Tests for reading a menu choice."""

    @patch("builtins.input", return_value="2")
    def test_returns_zero_based_index(self, mock_input, capsys):
        assert prompt_choice(["Submit", "Help"]) == 1

        output = capsys.readouterr().out
        assert "1. Submit" in output
        assert "0. Cancel" in output

    @patch("builtins.input", return_value="")
    def test_empty_answer_cancels(self, mock_input):
        assert prompt_choice(["Submit"]) == -1

    @patch("builtins.input", return_value="0")
    def test_zero_cancels(self, mock_input):
        assert prompt_choice(["Submit"]) == -1

    @patch("builtins.input", side_effect=["9", "abc", "1"])
    def test_invalid_answers_are_asked_again(self, mock_input, capsys):
        assert prompt_choice(["Submit", "Help"]) == 0

        assert mock_input.call_count == 3
        assert "Please enter a number between 0 and 2." in capsys.readouterr().out


class TestAboutText:
    def test_mentions_name_and_version(self):
        from gitlab_graph import __version__

        text = about_text()

        assert "GitLab Contribution Graph" in text
        assert __version__ in text


class TestCredentialsDialog:
    """Tests for entering credentials."""

    @patch("gitlab_graph.cli.show_main_menu")
    @patch("gitlab_graph.cli.getpass.getpass", return_value="glpat-new")
    @patch("builtins.input", side_effect=["https://gitlab.acme.io/", "1"])
    def test_submit_saves_and_opens_menu(self, mock_input, mock_getpass, mock_menu):
        store = MemorySecretStore()

        assert show_credentials_dialog(store) is True

        assert store.get(GITLAB_URL_KEY) == "https://gitlab.acme.io"
        assert store.get(GITLAB_ACCESS_TOKEN_KEY) == "glpat-new"
        mock_menu.assert_called_once()

    @patch("gitlab_graph.cli.show_main_menu")
    @patch("gitlab_graph.cli.getpass.getpass", return_value="")
    @patch("builtins.input", side_effect=["", "1"])
    def test_empty_answers_keep_stored_values(self, mock_input, mock_getpass, mock_menu, store):
        assert show_credentials_dialog(store) is True

        assert store.get(GITLAB_URL_KEY) == "https://gitlab.example.com"
        assert store.get(GITLAB_ACCESS_TOKEN_KEY) == "glpat-abc"

    @patch("gitlab_graph.cli.show_main_menu")
    @patch("gitlab_graph.cli.getpass.getpass", return_value="glpat-new")
    @patch("builtins.input", side_effect=["https://gitlab.acme.io", "2"])
    def test_help_shows_help_without_saving(self, mock_input, mock_getpass, mock_menu, capsys):
        store = MemorySecretStore()

        assert show_credentials_dialog(store) is False

        assert HELP_TEXT in capsys.readouterr().out
        assert not has_credentials(store)
        mock_menu.assert_not_called()

    @patch("gitlab_graph.cli.getpass.getpass", return_value="glpat-new")
    @patch("builtins.input", side_effect=["https://gitlab.acme.io", "0"])
    def test_cancel_raises_missing_credentials(self, mock_input, mock_getpass):
        store = MemorySecretStore()

        with pytest.raises(MissingCredentialsError):
            show_credentials_dialog(store)

        assert not has_credentials(store)

    @patch("gitlab_graph.cli.show_main_menu")
    @patch("gitlab_graph.cli.getpass.getpass", side_effect=["", "glpat-new"])
    @patch("builtins.input", side_effect=["https://gitlab.acme.io", "1", "", "1"])
    def test_repeats_until_both_values_given(self, mock_input, mock_getpass, mock_menu, capsys):
        store = MemorySecretStore()

        assert show_credentials_dialog(store) is True

        assert "Both the GitLab URL and the personal access token are required." in capsys.readouterr().out
        assert store.get(GITLAB_URL_KEY) == "https://gitlab.acme.io"
        assert store.get(GITLAB_ACCESS_TOKEN_KEY) == "glpat-new"
        assert mock_getpass.call_count == 2


class TestCredentialsRemovalDialog:
    """Tests for removing credentials."""

    @patch("builtins.input", return_value="1")
    def test_confirm_removes(self, mock_input, store):
        assert show_credentials_removal_dialog(store) is True

        assert not has_credentials(store)

    @patch("builtins.input", return_value="0")
    def test_cancel_keeps_credentials(self, mock_input, store):
        assert show_credentials_removal_dialog(store) is False

        assert has_credentials(store)


class TestMainMenu:
    """Tests for the main menu actions."""

    @patch("gitlab_graph.cli.webbrowser.open")
    @patch("builtins.input", return_value="1")
    def test_visit_gitlab_opens_browser(self, mock_input, mock_open, store):
        show_main_menu(store)

        mock_open.assert_called_once_with("https://gitlab.example.com")

    @patch("gitlab_graph.cli.run_widget", return_value=(True, "small graph"))
    @patch("builtins.input", return_value="2")
    def test_preview_small(self, mock_input, mock_run, store, capsys):
        show_main_menu(store)

        assert mock_run.call_args[0][0] == "small"
        assert "small graph" in capsys.readouterr().out

    @patch("gitlab_graph.cli.run_widget", return_value=(False, "Error: nope"))
    @patch("builtins.input", return_value="3")
    def test_preview_medium(self, mock_input, mock_run, store, capsys):
        show_main_menu(store)

        assert mock_run.call_args[0][0] == "medium"
        assert "Error: nope" in capsys.readouterr().out

    @patch("builtins.input", side_effect=["4", "1"])
    def test_remove_credentials(self, mock_input, store):
        show_main_menu(store)

        assert not has_credentials(store)

    @patch("builtins.input", return_value="5")
    def test_about(self, mock_input, store, capsys):
        show_main_menu(store)

        assert about_text() in capsys.readouterr().out

    @patch("gitlab_graph.cli.webbrowser.open")
    @patch("gitlab_graph.cli.run_widget")
    @patch("builtins.input", return_value="0")
    def test_cancel_does_nothing(self, mock_input, mock_run, mock_open, store):
        show_main_menu(store)

        mock_run.assert_not_called()
        mock_open.assert_not_called()
        assert has_credentials(store)
