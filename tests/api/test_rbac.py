"""Table-driven access-control tests over the HTTP surface.

Each row: method, path, caller (None = no token), expected status.
Roles come from the registry, so each caller is a principal seeded by
the ``app_registry`` fixture plus ``bob`` (a second subject) and
``certco`` (a certifier without a ledger entry).
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from credential_registry.models.domain import Domain
from credential_registry.models.user import Role
from credential_registry.services import token_service
from credential_registry.services.registry import CredentialRegistry
from tests.conftest import ADMIN, ISSUER, SUBJECT, auth, degree, enroll


@pytest.fixture(autouse=True)
def seeded(app_registry: CredentialRegistry) -> None:
    enroll(app_registry, "bob", Role.SUBJECT)
    enroll(app_registry, "certco", Role.CERTIFIER)
    app_registry.records[Domain.EDUCATION].create_record(ISSUER, SUBJECT, degree())


_RBAC_CASES = [
    # /v1/users (list) — admin only
    ("GET", "/v1/users", ADMIN, 200),
    ("GET", "/v1/users", SUBJECT, 403),
    ("GET", "/v1/users", "stranger", 403),
    ("GET", "/v1/users", None, 401),
    # /v1/users/stats — admin only
    ("GET", "/v1/users/stats", ADMIN, 200),
    ("GET", "/v1/users/stats", ISSUER, 403),
    # deactivate — admin only
    ("POST", "/v1/users/bob/deactivate", ADMIN, 200),
    ("POST", "/v1/users/bob/deactivate", SUBJECT, 403),
    ("POST", "/v1/users/bob/deactivate", None, 401),
    # records of one domain — admin only
    ("GET", "/v1/education/records", ADMIN, 200),
    ("GET", "/v1/education/records", ISSUER, 403),
    ("GET", "/v1/education/records", SUBJECT, 403),
    # one record — parties and admin
    ("GET", "/v1/education/records/1", SUBJECT, 200),
    ("GET", "/v1/education/records/1", ISSUER, 200),
    ("GET", "/v1/education/records/1", ADMIN, 200),
    ("GET", "/v1/education/records/1", "bob", 403),
    ("GET", "/v1/education/records/1", "certco", 403),
    ("GET", "/v1/education/records/1", None, 401),
    # request verification — the subject only
    ("POST", "/v1/education/records/1/request-verification", ISSUER, 403),
    ("POST", "/v1/education/records/1/request-verification", ADMIN, 403),
    ("POST", "/v1/education/records/1/request-verification", "bob", 403),
    ("POST", "/v1/education/records/1/request-verification", SUBJECT, 200),
    # pending queue — own queue or admin
    ("GET", "/v1/education/pending", ISSUER, 200),
    ("GET", f"/v1/education/pending?issuer={ISSUER}", ADMIN, 200),
    ("GET", f"/v1/education/pending?issuer={ISSUER}", "certco", 403),
    # issuer registration — domain role required
    ("POST", "/v1/certification/issuers", "certco", 201),
    ("POST", "/v1/certification/issuers", ISSUER, 403),
    ("POST", "/v1/certification/issuers", ADMIN, 403),
    # public reads
    ("GET", f"/v1/users/{SUBJECT}", None, 200),
    ("GET", "/v1/education/issuers", None, 200),
]

_BODIES = {
    "/v1/certification/issuers": {"org_name": "CertCo", "registration_ref": "C-1"},
}


@pytest.mark.parametrize(
    ("method", "path", "caller", "expected"),
    _RBAC_CASES,
    ids=[f"{m} {p} as {c}" for m, p, c, _ in _RBAC_CASES],
)
def test_access(
    client: TestClient,
    method: str,
    path: str,
    caller: str | None,
    expected: int,
) -> None:
    resp = client.request(method, path, headers=auth(caller), json=_BODIES.get(path))
    assert resp.status_code == expected


def test_invalid_token_is_401(client: TestClient) -> None:
    resp = client.get("/v1/users", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


def test_expired_token_is_401(client: TestClient) -> None:
    token = token_service.create_access_token(sub=ADMIN, ttl_minutes=-1)
    resp = client.get("/v1/users", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token expired"

