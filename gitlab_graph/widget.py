"""
Builds the contribution graph widget.

Ties together the date range, the events feed and the calendar, and turns
every failure on the way into text the user can read.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Callable, Optional

from gitlab_graph import config
from gitlab_graph.contribution_calendar import (
    UnsupportedConfigurationError,
    build_calendar,
    get_date_range,
    update_calendar_with_events,
)
from gitlab_graph.gitlab_client import GitLabClient, GitLabClientError
from gitlab_graph.renderer import (
    TITLE,
    GraphRenderer,
    TextGraphRenderer,
    format_error,
    render_contribution_graph,
)
from gitlab_graph.storage import MissingCredentialsError, SecretStore, load_credentials

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str], GitLabClient]


@dataclass
class ContributionGraph:
    """Result of rendering one widget."""

    family: str
    weeks: int
    day_of_week: int
    start_date: date
    end_date: date
    calendar: dict[str, int]
    total_events: int


def default_client_factory(url: str, token: str) -> GitLabClient:
    """Create a GitLab client using the configured timeout, retries and workers."""
    return GitLabClient(
        url,
        token,
        timeout=config.get_timeout(),
        max_retries=config.get_max_retries(),
        max_workers=config.get_max_workers(),
    )


def create_widget(
    family: str,
    store: SecretStore,
    renderer: Optional[GraphRenderer] = None,
    client_factory: Optional[ClientFactory] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> ContributionGraph:
    """
    Fetch the user's events and build the contribution graph.

    Args:
        family: Widget family ('small' or 'medium')
        store: Secret store holding the GitLab credentials
        renderer: Surface to draw the graph on (optional)
        client_factory: Creates the GitLab client from (url, token)
        now: Override for the current time (for testing)
        tz: Time zone for event dates (local time zone when None)

    Raises:
        UnsupportedConfigurationError: For families without a layout, before
            any request is made
        MissingCredentialsError: If the credentials are not stored
        GitLabClientError: If fetching the events fails
    """
    if now is None and tz is not None:
        now = datetime.now(tz)
    date_range = get_date_range(family, now)
    credentials = load_credentials(store)

    if client_factory is None:
        client_factory = default_client_factory
    client = client_factory(credentials.url, credentials.token)

    result = client.get_contribution_events(date_range.after)

    calendar = build_calendar(date_range.start_date, date_range.end_date)
    counted = update_calendar_with_events(calendar, result.events, tz)
    if counted != result.total:
        logger.info("%d of %d events fell outside the calendar", result.total - counted, result.total)

    if renderer is not None:
        render_contribution_graph(renderer, calendar, date_range.weeks, date_range.day_of_week)

    return ContributionGraph(
        family=family,
        weeks=date_range.weeks,
        day_of_week=date_range.day_of_week,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        calendar=calendar,
        total_events=counted,
    )


def describe_error(error: Exception) -> str:
    """Message shown to the user for a failed render."""
    if isinstance(
        error,
        (MissingCredentialsError, UnsupportedConfigurationError, GitLabClientError),
    ):
        return str(error)

    logger.error("Unexpected error while rendering the widget", exc_info=error)
    return f"Unexpected error: {error}"


def run_widget(
    family: str,
    store: SecretStore,
    client_factory: Optional[ClientFactory] = None,
    now: Optional[datetime] = None,
) -> tuple[bool, str]:
    """
    Render the widget as text, never raising.

    Returns:
        Tuple of (success, text); on failure the text is the error display
    """
    renderer = TextGraphRenderer()
    try:
        graph = create_widget(family, store, renderer, client_factory=client_factory, now=now)
    except Exception as e:
        return False, format_error(describe_error(e))

    title = (
        f"{TITLE}\n"
        f"{graph.total_events} contributions from "
        f"{graph.start_date.isoformat()} to {graph.end_date.isoformat()}"
    )
    return True, renderer.render(title=title)
