"""
FastAPI web application for gitlab-graph.

Serves the contribution graph as JSON and as an HTML widget page, and lets
the credentials be set or removed.
"""

from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field

from gitlab_graph import __version__, config
from gitlab_graph.contribution_calendar import UnsupportedConfigurationError
from gitlab_graph.gitlab_client import GitLabClientError, UnauthorizedError
from gitlab_graph.renderer import TITLE, GridRenderer
from gitlab_graph.storage import (
    GITLAB_URL_KEY,
    MissingCredentialsError,
    SQLiteSecretStore,
    has_credentials,
    remove_credentials,
    save_credentials,
)
from gitlab_graph.widget import create_widget, default_client_factory, describe_error

app = FastAPI(
    title="gitlab-graph",
    description="GitLab contribution graph widget",
    version=__version__,
)

templates = Jinja2Templates(directory=Path(__file__).parent / "templates")


class CredentialsUpdate(BaseModel):
    """Request model for storing GitLab credentials."""

    url: str = Field(..., min_length=1, max_length=2000, description="GitLab instance URL")
    token: str = Field(..., min_length=1, max_length=500, description="Personal access token")


def get_store():
    """Secret store dependency."""
    return SQLiteSecretStore(config.DB_PATH)


def get_client_factory():
    """GitLab client factory dependency."""
    return default_client_factory


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


def _build_graph(family: str, store, client_factory) -> dict:
    renderer = GridRenderer()
    graph = create_widget(family, store, renderer, client_factory=client_factory)
    return {
        "family": graph.family,
        "weeks": graph.weeks,
        "day_of_week": graph.day_of_week,
        "period": {
            "start": graph.start_date.isoformat(),
            "end": graph.end_date.isoformat(),
        },
        "total_events": graph.total_events,
        "columns": renderer.columns,
    }


@app.get("/api/graph")
def get_graph(
    family: str = "medium",
    store=Depends(get_store),
    client_factory=Depends(get_client_factory),
):
    """
    Get the contribution graph for a widget family.

    Returns:
        JSON with the period, the event total and the columns of day cells
    """
    try:
        return _build_graph(family, store, client_factory)
    except (MissingCredentialsError, UnsupportedConfigurationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnauthorizedError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except GitLabClientError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=describe_error(e))


@app.get("/widget", response_class=HTMLResponse)
def widget(
    request: Request,
    family: str = "medium",
    store=Depends(get_store),
    client_factory=Depends(get_client_factory),
):
    """Render the widget page; failures are shown on the page itself."""
    data = {"title": TITLE, "graph": None, "error": None}
    try:
        data["graph"] = _build_graph(family, store, client_factory)
    except Exception as e:
        data["error"] = describe_error(e)

    return templates.TemplateResponse(request, "widget.html", data)


@app.get("/api/credentials/status")
def get_credentials_status(store=Depends(get_store)):
    """Whether credentials are stored, and for which GitLab instance."""
    return {
        "configured": has_credentials(store),
        "url": store.get(GITLAB_URL_KEY),
    }


@app.post("/api/credentials")
def set_credentials(credentials: CredentialsUpdate, store=Depends(get_store)):
    """Store the GitLab URL and personal access token."""
    if not save_credentials(store, credentials.url, credentials.token):
        raise HTTPException(status_code=400, detail="Both url and token are required")
    return {"configured": True, "url": store.get(GITLAB_URL_KEY)}


@app.delete("/api/credentials")
def delete_credentials(store=Depends(get_store)):
    """Remove the stored credentials."""
    remove_credentials(store)
    return {"configured": False}
