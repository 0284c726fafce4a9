"""Unit tests for mapping reconciliation failures to HTTP responses."""

from __future__ import annotations

import json
from unittest import mock

import falcon
import falcon.testing
import pytest
from sqlalchemy.exc import OperationalError

from kudos.api.app import AppDependencies, create_app
from kudos.api.errors import error_status
from kudos.errors import (
    AuthError,
    KudosError,
    ProjectIntegrityError,
    ProjectNotFoundError,
    RepositoryUrlError,
    StorageError,
)
from kudos.github.errors import GitHubAPIError, GitHubResponseShapeError

_BODY = json.dumps(
    {
        "secret": "s3cret",
        "projectName": "Kudos",
        "projectSlug": "kudos",
        "reposToAdd": [],
        "reposToRemove": [],
    }
)


def _client_raising(error: BaseException) -> falcon.testing.TestClient:
    service = mock.MagicMock()
    service.reconcile = mock.AsyncMock(side_effect=error)
    return falcon.testing.TestClient(
        create_app(AppDependencies(reconcile_service=service))
    )


@pytest.mark.parametrize(
    ("error", "status", "title"),
    [
        (AuthError(), falcon.HTTP_401, "Unauthorized"),
        (ProjectNotFoundError("Kudos", "kudos"), falcon.HTTP_404, "Not found"),
        (
            ProjectIntegrityError("Kudos", "kudos", 2),
            falcon.HTTP_409,
            "Ambiguous project",
        ),
        (RepositoryUrlError("reef"), falcon.HTTP_422, "Unprocessable repository"),
        (
            GitHubAPIError.http_error(404, "octo/reef"),
            falcon.HTTP_502,
            "Upstream API failure",
        ),
        (
            GitHubResponseShapeError.missing("number"),
            falcon.HTTP_502,
            "Upstream API failure",
        ),
        (KudosError("odd"), falcon.HTTP_500, "Reconciliation failed"),
    ],
    ids=[
        "auth",
        "not-found",
        "ambiguous",
        "bad-url",
        "github-http",
        "github-shape",
        "other",
    ],
)
def test_errors_map_to_status(error: KudosError, status: str, title: str) -> None:
    """Each failure kind has its own status and a JSON description."""
    result = _client_raising(error).simulate_post("/reconcile", body=_BODY)

    assert result.status == status
    assert result.json == {"title": title, "description": str(error)}
    assert error_status(error) == (status, title)


def test_storage_errors_hide_driver_details() -> None:
    """Storage failures answer 503 without echoing SQL or driver text."""
    cause = OperationalError(
        "INSERT INTO issues VALUES (:p1)", {}, Exception("password=hunter2")
    )
    result = _client_raising(StorageError("insert_issues", cause)).simulate_post(
        "/reconcile", body=_BODY
    )

    assert result.status == falcon.HTTP_503
    assert result.json == {
        "title": "Storage failure",
        "description": "Storage operation 'insert_issues' failed",
    }
    assert "hunter2" not in result.text


def test_auth_error_does_not_leak_secret() -> None:
    """The 401 body does not echo the presented secret."""
    result = _client_raising(AuthError()).simulate_post("/reconcile", body=_BODY)

    assert "s3cret" not in result.text
