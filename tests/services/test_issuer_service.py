from __future__ import annotations

import pytest

from credential_registry.core.errors import (
    AlreadyRegisteredIssuerError,
    InvalidPayloadError,
    NotRegisteredError,
    RoleMismatchError,
    UnauthorizedError,
)
from credential_registry.models.domain import Domain
from credential_registry.models.user import Role
from credential_registry.services.registry import CredentialRegistry
from tests.conftest import ADMIN, FIXED_NOW, enroll


def test_issuer_registers_in_matching_domain(engine: CredentialRegistry) -> None:
    enroll(engine, "acme", Role.INSTITUTION)
    ledger = engine.issuers[Domain.EDUCATION]

    reg = ledger.register_issuer(
        "acme", " Acme U ", "REG-1", org_metadata={"country": "NZ"}
    )
    assert reg.org_name == "Acme U"
    assert reg.registration_ref == "REG-1"
    assert reg.org_metadata == {"country": "NZ"}
    assert reg.registered_at == FIXED_NOW
    assert ledger.is_registered_issuer("acme") is True
    assert ledger.get_registration("acme") == reg
    assert [r.principal for r in ledger.list_issuers()] == ["acme"]


def test_registration_is_per_domain(engine: CredentialRegistry) -> None:
    enroll(engine, "acme", Role.INSTITUTION)
    engine.issuers[Domain.EDUCATION].register_issuer("acme", "Acme U", "REG-1")
    assert engine.issuers[Domain.CERTIFICATION].is_registered_issuer("acme") is False


def test_wrong_role_is_role_mismatch(engine: CredentialRegistry) -> None:
    enroll(engine, "certco", Role.CERTIFIER)
    with pytest.raises(RoleMismatchError):
        engine.issuers[Domain.EDUCATION].register_issuer("certco", "CertCo", "REG-9")
    assert engine.issuers[Domain.EDUCATION].is_registered_issuer("certco") is False


def test_second_registration_rejected(engine: CredentialRegistry) -> None:
    enroll(engine, "acme", Role.INSTITUTION)
    ledger = engine.issuers[Domain.EDUCATION]
    ledger.register_issuer("acme", "Acme U", "REG-1")
    with pytest.raises(AlreadyRegisteredIssuerError):
        ledger.register_issuer("acme", "Acme University", "REG-2")
    assert ledger.get_registration("acme").org_name == "Acme U"


def test_deactivated_issuer_cannot_register(engine: CredentialRegistry) -> None:
    enroll(engine, "acme", Role.INSTITUTION)
    engine.identity.deactivate(ADMIN, "acme")
    with pytest.raises(UnauthorizedError):
        engine.issuers[Domain.EDUCATION].register_issuer("acme", "Acme U", "REG-1")


@pytest.mark.parametrize(
    ("org_name", "ref", "field"),
    [("  ", "REG-1", "org_name"), ("Acme U", "", "registration_ref")],
)
def test_blank_fields_rejected(
    engine: CredentialRegistry, org_name: str, ref: str, field: str
) -> None:
    enroll(engine, "acme", Role.INSTITUTION)
    with pytest.raises(InvalidPayloadError) as exc:
        engine.issuers[Domain.EDUCATION].register_issuer("acme", org_name, ref)
    assert exc.value.field == field
    assert engine.issuers[Domain.EDUCATION].is_registered_issuer("acme") is False


def test_get_registration_unknown(engine: CredentialRegistry) -> None:
    with pytest.raises(NotRegisteredError):
        engine.issuers[Domain.EMPLOYMENT].get_registration("nobody")
