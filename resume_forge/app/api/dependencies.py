import logging
from functools import lru_cache

from fastapi import Depends

from resume_forge.app.core.config import Settings, get_settings
from resume_forge.app.database.database import get_session_local
from resume_forge.app.ledger.store import LedgerStore
from resume_forge.app.llm.generator import GeneratorClient
from resume_forge.app.services.payments import PaymentWebhookReconciler
from resume_forge.app.services.tailoring import TailoringCoordinator

log = logging.getLogger(__name__)


@lru_cache
def get_ledger_store() -> LedgerStore:
    """
    Get the process-wide ledger store.

    Args:
        None

    Returns:
        LedgerStore: A ledger store bound to the application's session factory.

    Notes:
        1. Built on first use and cached for the life of the process.
        2. Tests replace it through `app.dependency_overrides`.

    """
    _msg = "Creating ledger store"
    log.debug(_msg)
    return LedgerStore(get_session_local())


@lru_cache
def get_generator_client() -> GeneratorClient:
    """
    Get the process-wide generator client, built once from settings.

    Args:
        None

    Returns:
        GeneratorClient: The client for the pinned generation model.

    """
    _msg = "Creating generator client"
    log.debug(_msg)
    return GeneratorClient.from_settings(get_settings())


def get_tailoring_coordinator(
    ledger: LedgerStore = Depends(get_ledger_store),
    generator: GeneratorClient = Depends(get_generator_client),
    settings: Settings = Depends(get_settings),
) -> TailoringCoordinator:
    """Assemble the coordinator from the injected ledger and generator."""
    return TailoringCoordinator(
        ledger=ledger,
        generator=generator,
        cost=settings.generation_cost,
        timeout_seconds=settings.generation_timeout_seconds,
    )


def get_webhook_reconciler(
    ledger: LedgerStore = Depends(get_ledger_store),
    settings: Settings = Depends(get_settings),
) -> PaymentWebhookReconciler:
    """Assemble the webhook reconciler from the injected ledger and the signing secret."""
    return PaymentWebhookReconciler(
        ledger=ledger,
        webhook_secret=settings.stripe_webhook_secret,
    )
