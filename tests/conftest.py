from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from credential_registry.api.dependencies import registry
from credential_registry.main import app
from credential_registry.models.domain import Domain
from credential_registry.models.payloads import EducationPayload
from credential_registry.models.user import Role
from credential_registry.repos.unit_of_work import InMemoryStore
from credential_registry.services import token_service
from credential_registry.services.registry import CredentialRegistry, build_registry

# Ensure repo root is on sys.path so `import credential_registry` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

ADMIN = "admin"
SUBJECT = "alice"
ISSUER = "acme-university"

# 2026-10-19T12:00:00Z
FIXED_NOW = 1792411200
TODAY = date(2026, 10, 19)


def fixed_clock() -> int:
    return FIXED_NOW


@pytest.fixture(autouse=True)
def reset_app_store() -> None:
    """Start every test with an empty application store."""
    if isinstance(registry.store, InMemoryStore):
        registry.store.clear()


# ---------------------------------------------------------------------------
# Engine fixtures (no HTTP)
# ---------------------------------------------------------------------------


def enroll(reg: CredentialRegistry, principal: str, role: Role) -> None:
    reg.identity.register_user(ADMIN, principal, role, principal.title())


def make_issuer(
    reg: CredentialRegistry,
    domain: Domain,
    principal: str,
    org_name: str = "Acme U",
) -> None:
    enroll(reg, principal, domain.issuer_role)
    reg.issuers[domain].register_issuer(principal, org_name, f"REG-{principal}")


def degree(**overrides: object) -> EducationPayload:
    fields: dict[str, object] = {
        "degree": "BSc",
        "start_date": date(2020, 1, 1),
        "end_date": date(2024, 1, 1),
    }
    fields.update(overrides)
    return EducationPayload(**fields)  # type: ignore[arg-type]


@pytest.fixture
def engine() -> CredentialRegistry:
    """Fresh registry on its own in-memory store with a bootstrapped Admin."""
    reg = build_registry(InMemoryStore(), clock=fixed_clock)
    reg.identity.bootstrap_admin(ADMIN, "Admin")
    return reg


@pytest.fixture
def education(engine: CredentialRegistry) -> CredentialRegistry:
    """Admin, subject ``alice`` and registered institution ``acme-university``."""
    enroll(engine, SUBJECT, Role.SUBJECT)
    make_issuer(engine, Domain.EDUCATION, ISSUER)
    return engine


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(principal: str = SUBJECT) -> str:
    """Create a valid ES256 JWT for ``principal``."""
    return token_service.create_access_token(sub=principal)


def auth(principal: str | None) -> dict[str, str]:
    if principal is None:
        return {}
    return {"Authorization": f"Bearer {mint_token(principal)}"}


@pytest.fixture
def app_registry() -> CredentialRegistry:
    """The application's registry, holding an Admin, ``alice`` and an
    education issuer ``acme-university`` registered as "Acme U"."""
    registry.identity.bootstrap_admin(ADMIN, "Admin")
    enroll(registry, SUBJECT, Role.SUBJECT)
    make_issuer(registry, Domain.EDUCATION, ISSUER)
    return registry
