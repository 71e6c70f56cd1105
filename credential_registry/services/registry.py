"""Composition root for the engine.

One identity registry and aggregation layer, and for each domain one
issuer ledger, record store and workflow, all over the same store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from credential_registry.core.clock import Clock, epoch_now
from credential_registry.core.config import Settings
from credential_registry.models.domain import Domain
from credential_registry.repos.unit_of_work import InMemoryStore, Store
from credential_registry.services.aggregation_service import AggregationService
from credential_registry.services.identity_service import IdentityRegistry
from credential_registry.services.issuer_service import IssuerLedger
from credential_registry.services.record_service import RecordStore
from credential_registry.services.workflow_service import VerificationWorkflow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialRegistry:
    store: Store
    identity: IdentityRegistry
    issuers: dict[Domain, IssuerLedger]
    records: dict[Domain, RecordStore]
    workflows: dict[Domain, VerificationWorkflow]
    aggregation: AggregationService


def build_registry(store: Store, *, clock: Clock = epoch_now) -> CredentialRegistry:
    return CredentialRegistry(
        store=store,
        identity=IdentityRegistry(store, clock=clock),
        issuers={d: IssuerLedger(store, d, clock=clock) for d in Domain},
        records={d: RecordStore(store, d, clock=clock) for d in Domain},
        workflows={d: VerificationWorkflow(store, d, clock=clock) for d in Domain},
        aggregation=AggregationService(store),
    )


def create_store(settings: Settings) -> Store:
    """SQL store when DATABASE_URL is set, otherwise in-memory."""
    if settings.database_url is None:
        logger.info("No DATABASE_URL configured, using in-memory store")
        return InMemoryStore()

    from credential_registry.db.engine import create_db_engine
    from credential_registry.db.sql_store import SqlStore

    return SqlStore(create_db_engine(settings.database_url, echo=settings.is_dev))
