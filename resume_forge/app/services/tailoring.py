import asyncio
import contextlib
import logging

from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from resume_forge.app.core.exceptions import (
    GenerationFailed,
    InsufficientCredits,
    InvalidInput,
    ResumeForgeError,
    StorageUnavailable,
    Unavailable,
)
from resume_forge.app.ledger.store import LedgerStore
from resume_forge.app.llm.generator import GeneratorClient, classify_error
from resume_forge.app.llm.models import TailoredResume

log = logging.getLogger(__name__)


class GenerationRequest(BaseModel):
    """The inputs of one paid generation.

    Attributes:
        job_description (str): The job description to tailor towards.
        resume_section (str): The resume text to tailor.
        section_type (str | None): Optional section label used in the prompt.
        industry (str | None): Optional industry used in the prompt.

    """

    job_description: str
    resume_section: str
    section_type: str | None = None
    industry: str | None = None


def validate_request(request: GenerationRequest) -> GenerationRequest:
    """Check that both required texts are non-empty and return a trimmed copy.

    Args:
        request (GenerationRequest): The incoming request.

    Returns:
        GenerationRequest: The request with surrounding whitespace removed.

    Raises:
        InvalidInput: If the job description or resume section is blank.

    """
    job_description = (request.job_description or "").strip()
    resume_section = (request.resume_section or "").strip()
    if not job_description:
        raise InvalidInput("Please enter a Job Description.")
    if not resume_section:
        raise InvalidInput("Please enter your Current Resume Section.")

    section_type = (request.section_type or "").strip() or None
    industry = (request.industry or "").strip() or None
    return GenerationRequest(
        job_description=job_description,
        resume_section=resume_section,
        section_type=section_type,
        industry=industry,
    )


class TailoringCoordinator:
    """Spends a credit, calls the generator, and refunds the credit if the call fails.

    Attributes:
        ledger (LedgerStore): The credit ledger.
        generator (GeneratorClient): The external generation client.
        cost (int): Credits charged per generation.
        timeout_seconds (float | None): Upper bound on the generator call.

    """

    def __init__(
        self,
        ledger: LedgerStore,
        generator: GeneratorClient,
        cost: int = 1,
        timeout_seconds: float | None = None,
    ):
        self.ledger = ledger
        self.generator = generator
        self.cost = cost
        self.timeout_seconds = timeout_seconds

    async def _call_generator(self, request: GenerationRequest) -> TailoredResume:
        """Call the generator under the configured timeout.

        Raises:
            GeneratorError: Any classified generator failure; a timeout becomes `Unavailable`.

        """
        call = self.generator.call(
            job_description=request.job_description,
            resume_section=request.resume_section,
            section_type=request.section_type,
            industry=request.industry,
        )
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except TimeoutError as e:
            raise Unavailable(
                f"The generation service did not answer within {self.timeout_seconds} seconds."
            ) from e

    async def _debit(self, user_id: str) -> bool:
        """Debit the cost in a worker thread.

        Notes:
            1. The debit is shielded, so a caller cancelled mid-debit still sees it
               finish; a debit that landed is refunded before the cancellation propagates.

        """
        debit = asyncio.ensure_future(run_in_threadpool(self.ledger.try_debit, user_id, self.cost))
        try:
            return await asyncio.shield(debit)
        except asyncio.CancelledError:
            debited = False
            with contextlib.suppress(ResumeForgeError):
                debited = await debit
            if debited:
                await run_in_threadpool(self._refund, user_id)
            raise

    def _refund(self, user_id: str) -> bool:
        """Give back the debited credit, returning whether the refund was written.

        Notes:
            1. A refund failure is logged but never raised, so it cannot replace the
               generation failure the caller is about to receive.

        """
        try:
            self.ledger.credit(user_id, self.cost)
        except StorageUnavailable:
            _msg = f"Refund of {self.cost} credit(s) to user {user_id} failed; balance is short"
            log.exception(_msg)
            return False
        _msg = f"Refunded {self.cost} credit(s) to user {user_id}"
        log.info(_msg)
        return True

    async def generate(self, user_id: str, request: GenerationRequest) -> TailoredResume:
        """Run one paid generation for a user.

        Args:
            user_id (str): The user paying for the generation.
            request (GenerationRequest): The job description and resume section.

        Returns:
            TailoredResume: The tailored result. The credit stays spent.

        Raises:
            InvalidInput: If the request is blank. The ledger is not touched.
            InsufficientCredits: If the balance does not cover the cost. The generator
                is not called.
            GenerationFailed: If the generator failed. The credit was refunded unless
                `refunded` is False on the error.
            StorageUnavailable: If the debit could not be written.

        Notes:
            1. Validate the request before touching the ledger.
            2. Debit the cost. The debit commits before the generator is called.
            3. Call the generator under a timeout.
            4. On failure, refund in a separate transaction and raise `GenerationFailed`.
            5. If the caller is cancelled after the debit, refund and let the
               cancellation propagate.
            6. Ledger calls run in a worker thread so the event loop never waits on the database.

        """
        _msg = f"generate starting for user {user_id}"
        log.debug(_msg)

        request = validate_request(request)

        if not await self._debit(user_id):
            raise InsufficientCredits(user_id=user_id, cost=self.cost)

        try:
            result = await self._call_generator(request)
        except asyncio.CancelledError:
            _msg = f"Generation cancelled for user {user_id}; refunding"
            log.warning(_msg)
            await asyncio.shield(run_in_threadpool(self._refund, user_id))
            raise
        except Exception as e:
            failure = classify_error(e)
            _msg = f"Generation failed for user {user_id} ({failure.kind}); refunding"
            log.warning(_msg)
            refunded = await run_in_threadpool(self._refund, user_id)
            raise GenerationFailed(cause=failure, refunded=refunded) from e

        _msg = f"generate returning for user {user_id} (degraded={result.degraded})"
        log.debug(_msg)
        return result
