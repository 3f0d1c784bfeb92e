"""Shared test doubles and Stripe payload helpers."""

import asyncio
import hashlib
import hmac
import json
import time

from resume_forge.app.llm.models import TailoredResume

WEBHOOK_SECRET = "whsec_test_secret"
TEST_USER_ID = "user-1"


class FakeGenerator:
    """Stand-in for GeneratorClient that records calls and returns a canned outcome."""

    def __init__(self, result=None, error=None, delay=0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = []

    async def call(self, job_description, resume_section, section_type=None, industry=None):
        self.calls.append(
            {
                "job_description": job_description,
                "resume_section": resume_section,
                "section_type": section_type,
                "industry": industry,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return TailoredResume(tailored_resume="Foo")


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header for a payload."""
    timestamp = timestamp if timestamp is not None else int(time.time())
    signed_payload = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def checkout_event(
    event_id: str = "evt_1",
    user_id: str | None = TEST_USER_ID,
    credits: str | None = "5",
    event_type: str = "checkout.session.completed",
    payment_status: str = "paid",
) -> str:
    """Serialize a checkout session event the way Stripe sends it."""
    metadata = {}
    if user_id is not None:
        metadata["userId"] = user_id
    if credits is not None:
        metadata["creditsToAdd"] = credits
    return json.dumps(
        {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "data": {
                "object": {
                    "id": "cs_test_1",
                    "object": "checkout.session",
                    "payment_status": payment_status,
                    "metadata": metadata,
                }
            },
        }
    )
