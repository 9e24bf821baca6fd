"""
GitLab API client for fetching the authenticated user's activity events.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Personal access token is invalid."


class GitLabClientError(Exception):
    """Base exception for GitLab client errors."""

    pass


class UnauthorizedError(GitLabClientError):
    """Raised when GitLab rejects the personal access token."""

    pass


class RequestFailedError(GitLabClientError):
    """Raised when an events request fails for any other reason."""

    pass


@dataclass
class EventsPage:
    """One page of the events feed."""

    events: list[str]
    total_pages: int | None = None
    next_page: int | None = None


@dataclass
class EventsResult:
    """All events fetched for a contribution graph."""

    events: list[str]
    total: int


def _parse_int_header(value: str | None) -> int | None:
    if value is None or str(value).strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


class GitLabClient:
    """Client for the GitLab REST API (v4)."""

    # GitLab caps per_page at 100
    PER_PAGE = 100
    RETRY_STATUSES = (502, 503, 504)

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 15.0,
        max_retries: int = 2,
        max_workers: int = 4,
    ):
        """
        Initialize the GitLab client.

        Args:
            base_url: GitLab instance URL, e.g. https://gitlab.example.com
            token: Personal access token with the read_user or api scope
            timeout: Timeout in seconds for each request
            max_retries: Retries for transient failures (0 disables retrying)
            max_workers: Maximum number of pages fetched at the same time
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.max_workers = max(1, max_workers)
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            }
        )

        if max_retries > 0:
            retry = Retry(
                total=max_retries,
                backoff_factor=0.5,
                status_forcelist=self.RETRY_STATUSES,
                allowed_methods=frozenset(["GET"]),
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry, pool_maxsize=self.max_workers)
            self.session.mount("https://", adapter)
            self.session.mount("http://", adapter)

    @property
    def events_url(self) -> str:
        return f"{self.base_url}/api/v4/events"

    def get_events_page(self, after: str, page: int = 1) -> EventsPage:
        """
        Fetch one page of the authenticated user's events.

        Args:
            after: Only events created after this date (YYYY-MM-DD) are returned
            page: Page number, starting at 1

        Returns:
            EventsPage with the created_at timestamps and pagination headers

        Raises:
            UnauthorizedError: If the access token is rejected
            RequestFailedError: If the request or its response is unusable
        """
        params = {
            "after": after,
            "sort": "asc",
            "per_page": self.PER_PAGE,
            "page": page,
        }

        logger.debug("Fetching events page %d (after %s)", page, after)
        try:
            response = self.session.get(self.events_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise RequestFailedError(f"Could not reach GitLab at {self.base_url}: {e}") from e

        return self._parse_events_response(response)

    def _parse_events_response(self, response) -> EventsPage:
        if response.status_code == 401:
            raise UnauthorizedError(UNAUTHORIZED_MESSAGE)

        try:
            data = response.json()
        except ValueError:
            raise RequestFailedError(
                f"GitLab API error: {response.status_code} - response is not JSON"
            )

        if not isinstance(data, list):
            message = data.get("message") if isinstance(data, dict) else None
            if message == "401 Unauthorized":
                raise UnauthorizedError(UNAUTHORIZED_MESSAGE)
            if message:
                raise RequestFailedError(str(message))
            raise RequestFailedError(
                f"GitLab API error: {response.status_code} - unexpected response body"
            )

        events = []
        for event in data:
            if not isinstance(event, dict) or not event.get("created_at"):
                raise RequestFailedError("GitLab API returned an event without created_at")
            events.append(event["created_at"])

        return EventsPage(
            events=events,
            total_pages=_parse_int_header(response.headers.get("X-Total-Pages")),
            next_page=_parse_int_header(response.headers.get("X-Next-Page")),
        )

    def get_contribution_events(self, after: str) -> EventsResult:
        """
        Fetch every event created after a date, across all pages.

        The first page tells how many pages there are; the remaining pages are
        then fetched concurrently. If any page fails the whole fetch fails.

        Args:
            after: Only events created after this date (YYYY-MM-DD) are returned

        Returns:
            EventsResult with all created_at timestamps and their count
        """
        first_page = self.get_events_page(after, page=1)
        pages = [first_page.events]

        if first_page.total_pages is not None:
            if first_page.total_pages > 1:
                pages.extend(
                    self._fetch_pages(after, list(range(2, first_page.total_pages + 1)))
                )
        else:
            # X-Total-Pages is left out for very large result sets
            current_page = 1
            next_page = first_page.next_page
            while next_page and next_page > current_page:
                page = self.get_events_page(after, page=next_page)
                pages.append(page.events)
                current_page, next_page = next_page, page.next_page

        events = [event for page_events in pages for event in page_events]
        logger.info("Fetched %d events from %d page(s)", len(events), len(pages))
        return EventsResult(events=events, total=len(events))

    def _fetch_pages(self, after: str, page_numbers: list[int]) -> list[list[str]]:
        """Fetch several pages on a thread pool and return them in page order."""
        results: dict[int, list[str]] = {}
        workers = min(self.max_workers, len(page_numbers))

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self.get_events_page, after, page): page
                for page in page_numbers
            }
            try:
                for future in as_completed(futures):
                    results[futures[future]] = future.result().events
            except Exception:
                for future in futures:
                    future.cancel()
                raise

        return [results[page] for page in page_numbers]
