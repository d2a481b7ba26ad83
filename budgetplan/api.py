"""Budget projections API interactions."""

import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional

import requests

from budgetplan.domain.matrix import Projection

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api"

TOKEN_ENV_VAR = "BUDGETPLAN_TOKEN"


def _headers(token: Optional[str], accept: str = "application/json") -> dict[str, str]:
    headers = {"Accept": accept}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def fetch_matrix(base_url: str, year: int, token: Optional[str] = None) -> dict[str, Any]:
    """Get the projection matrix for a year.

    Args:
        base_url: API root, e.g. ``http://localhost:5000/api``.
        year: Fiscal year.
        token: Optional bearer token.

    Returns:
        Matrix JSON with income and expense categories.

    Raises:
        requests.RequestException: If API request fails.
    """
    url = _url(base_url, f"budget-projections/{year}")
    logger.debug("GET %s", url)
    response = requests.get(url, headers=_headers(token))
    response.raise_for_status()
    return response.json()


def save_projections(
    base_url: str,
    year: int,
    projections: Sequence[Projection],
    token: Optional[str] = None,
    revision: Optional[str] = None,
) -> dict[str, Any]:
    """Replace the projections of a year in one request.

    Args:
        base_url: API root.
        year: Fiscal year.
        projections: Records to store; cells left out are cleared server side.
        token: Optional bearer token.
        revision: Version token of the loaded matrix, if the server sent one.

    Returns:
        Server response JSON (empty dict when the body is empty).

    Raises:
        requests.RequestException: If API request fails.
    """
    url = _url(base_url, "budget-projections/bulk")
    body: dict[str, Any] = {
        "year": year,
        "projections": [p.to_payload() for p in projections],
    }
    if revision is not None:
        body["revision"] = revision

    logger.debug("POST %s with %d projections", url, len(projections))
    response = requests.post(url, json=body, headers=_headers(token))
    response.raise_for_status()
    return response.json() if response.content else {}


def upload_csv(base_url: str, path: Path, year: int, token: Optional[str] = None) -> dict[str, Any]:
    """Upload a CSV file for the server to import.

    Args:
        base_url: API root.
        path: CSV file to upload.
        year: Fiscal year the rows belong to.
        token: Optional bearer token.

    Returns:
        Server response JSON including ``recordsImported``.

    Raises:
        requests.RequestException: If API request fails.
        OSError: If the file cannot be read.
    """
    url = _url(base_url, "budget-projections/import-csv")
    logger.debug("POST %s (%s)", url, path.name)
    with open(path, "rb") as f:
        response = requests.post(
            url,
            files={"file": (path.name, f, "text/csv")},
            data={"year": str(year)},
            headers=_headers(token),
        )
    response.raise_for_status()
    return response.json()


def download_csv(base_url: str, year: int, token: Optional[str] = None) -> str:
    """Get the server-rendered CSV export of a year.

    Args:
        base_url: API root.
        year: Fiscal year.
        token: Optional bearer token.

    Returns:
        CSV text.

    Raises:
        requests.RequestException: If API request fails.
    """
    url = _url(base_url, f"budget-projections/{year}/export-csv")
    logger.debug("GET %s", url)
    response = requests.get(url, headers=_headers(token, accept="text/csv"))
    response.raise_for_status()
    if response.encoding is None:
        response.encoding = "utf-8"
    return response.text


def get_token() -> Optional[str]:
    """Get the API token from environment.

    Returns:
        Token string or None if not set.
    """
    return os.environ.get(TOKEN_ENV_VAR)
