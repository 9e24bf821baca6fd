"""
Interactive dialogs for gitlab-graph.

Credentials entry, credential removal and the main menu.
"""

import getpass
import webbrowser

from gitlab_graph import __version__
from gitlab_graph.storage import (
    GITLAB_ACCESS_TOKEN_KEY,
    GITLAB_URL_KEY,
    MissingCredentialsError,
    SecretStore,
    remove_credentials,
    save_credentials,
)
from gitlab_graph.widget import run_widget

PERSONAL_ACCESS_TOKEN_DOCS = (
    "https://docs.gitlab.com/ee/user/profile/personal_access_tokens.html"
    "#creating-a-personal-access-token"
)

HELP_TEXT = f"""GitLab Contribution Graph

Credentials:
  - GitLab URL: The GitLab server you want to connect to.
    For instance: "https://gitlab.example.com".
  - Personal Access Token: It is used to authenticate with the GitLab API.
    For more information, visit {PERSONAL_ACCESS_TOKEN_DOCS}
"""


def prompt_choice(actions: list[str], cancel_label: str = "Cancel") -> int:
    """
    Show numbered actions and read the user's choice.

    Returns:
        Index of the chosen action, or -1 for cancel
    """
    for number, action in enumerate(actions, start=1):
        print(f"  {number}. {action}")
    print(f"  0. {cancel_label}")

    while True:
        answer = input("> ").strip().lower()
        if answer in ("", "0", "q"):
            return -1
        if answer.isdigit() and 1 <= int(answer) <= len(actions):
            return int(answer) - 1
        print(f"Please enter a number between 0 and {len(actions)}.")


def about_text() -> str:
    """Text for the About menu entry."""
    return (
        f"GitLab Contribution Graph {__version__}\n"
        "Shows your recent GitLab activity as a contribution calendar.\n"
        "Small graphs cover 7 weeks, medium graphs 17 weeks."
    )


def show_credentials_dialog(store: SecretStore, client_factory=None) -> bool:
    """
    Ask the user for the GitLab URL and personal access token.

    Empty answers keep the stored value. The dialog repeats until both values
    are present, then the main menu is shown.

    Returns:
        True if credentials were saved, False if help was shown instead

    Raises:
        MissingCredentialsError: If the user cancels
    """
    while True:
        current_url = store.get(GITLAB_URL_KEY)
        current_token = store.get(GITLAB_ACCESS_TOKEN_KEY)

        print("GitLab Credentials")
        print(
            "Please enter the fields below to use the GitLab Contribution Graph. "
            "Your credentials will be stored locally."
        )
        url_prompt = f"GitLab URL [{current_url}]: " if current_url else "GitLab URL: "
        url = input(url_prompt).strip() or current_url
        token_prompt = (
            "Personal Access Token [keep current]: "
            if current_token
            else "Personal Access Token: "
        )
        token = getpass.getpass(token_prompt).strip() or current_token

        index = prompt_choice(["Submit", "Help"])

        if index == 1:
            print(HELP_TEXT)
            return False
        elif index != 0:
            raise MissingCredentialsError()

        if save_credentials(store, url, token):
            print("Credentials saved.\n")
            show_main_menu(store, client_factory=client_factory)
            return True

        print("Both the GitLab URL and the personal access token are required.\n")


def show_credentials_removal_dialog(store: SecretStore) -> bool:
    """
    Confirm and remove the stored credentials.

    Returns:
        True if the credentials were removed
    """
    print("Remove Credentials")
    print("Are you sure you want to remove the stored credentials?")

    if prompt_choice(["Remove"]) == 0:
        remove_credentials(store)
        print("Credentials removed.")
        return True
    return False


def show_main_menu(store: SecretStore, client_factory=None) -> None:
    """Show the main menu and run the chosen action."""
    print("GitLab Contribution Graph")
    index = prompt_choice(
        [
            "Visit GitLab",
            "Preview Small Widget",
            "Preview Medium Widget",
            "Remove Credentials",
            "About",
        ]
    )

    if index == 0:
        url = store.get(GITLAB_URL_KEY)
        if url:
            webbrowser.open(url)
        else:
            print(str(MissingCredentialsError()))
    elif index in (1, 2):
        family = "small" if index == 1 else "medium"
        _, text = run_widget(family, store, client_factory=client_factory)
        print(text)
    elif index == 3:
        show_credentials_removal_dialog(store)
    elif index == 4:
        print(about_text())
