"""
gitlab-graph: GitLab contribution graph

Entry point for the command-line tool.
"""

import argparse
import logging

from gitlab_graph import config
from gitlab_graph.cli import (
    about_text,
    show_credentials_dialog,
    show_credentials_removal_dialog,
    show_main_menu,
)
from gitlab_graph.renderer import format_error
from gitlab_graph.storage import (
    MissingCredentialsError,
    SQLiteSecretStore,
    has_credentials,
    seed_from_environment,
)
from gitlab_graph.widget import run_widget

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitlab-graph",
        description="Show your recent GitLab activity as a contribution graph.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command")

    show_parser = subparsers.add_parser("show", help="Print the contribution graph")
    show_parser.add_argument(
        "--family",
        default="medium",
        help="Widget family: small (7 weeks) or medium (17 weeks)",
    )

    subparsers.add_parser("credentials", help="Enter the GitLab URL and access token")
    subparsers.add_parser("remove-credentials", help="Remove the stored credentials")
    subparsers.add_parser("about", help="Show information about gitlab-graph")

    serve_parser = subparsers.add_parser("serve", help="Run the web widget")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else config.LOG_LEVEL.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Validate configuration
    try:
        config.validate_config()
    except ValueError as e:
        print(f"\nConfiguration Error:\n{e}")
        return 1

    _configure_logging(args.verbose)

    if args.command == "about":
        print(about_text())
        return 0

    store = SQLiteSecretStore(config.DB_PATH)
    if seed_from_environment(store, *config.get_env_credentials()):
        logger.info("Stored credentials from GITLAB_URL and GITLAB_TOKEN")

    if args.command == "serve":
        import uvicorn

        uvicorn.run("gitlab_graph.app:app", host=args.host, port=args.port)
        return 0

    try:
        if args.command == "show":
            ok, text = run_widget(args.family, store)
            print(text)
            return 0 if ok else 1
        elif args.command == "credentials":
            show_credentials_dialog(store)
        elif args.command == "remove-credentials":
            show_credentials_removal_dialog(store)
        elif has_credentials(store):
            show_main_menu(store)
        else:
            show_credentials_dialog(store)
    except MissingCredentialsError as e:
        print(format_error(str(e)))
        return 1
    except (KeyboardInterrupt, EOFError):
        print()
        return 1

    return 0


if __name__ == "__main__":
    exit(main())
