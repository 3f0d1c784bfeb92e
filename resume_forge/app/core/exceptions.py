"""Error taxonomy shared by the ledger, the generator client and the services.

Every error carries a stable ``kind`` string and a ``retryable`` flag. The
HTTP layer maps kinds to status codes so the front end can tell "buy
credits" apart from "generation failed, credit refunded" and from "system
unavailable, try again later".
"""

import logging

log = logging.getLogger(__name__)


class ResumeForgeError(Exception):
    """Base class for all application errors.

    Attributes:
        kind (str): Stable machine-readable name of the error.
        retryable (bool): Whether retrying the same request later may succeed.
        message (str): Human-readable description.

    """

    kind = "ResumeForgeError"
    retryable = False

    def __init__(self, message: str = ""):
        self.message = message or self.kind
        super().__init__(self.message)


class InvalidInput(ResumeForgeError):
    """The request is malformed or missing a required field. No state was changed."""

    kind = "InvalidInput"


class InsufficientCredits(ResumeForgeError):
    """The ledger balance does not cover the cost of the operation. No state was changed."""

    kind = "InsufficientCredits"

    def __init__(self, user_id: str, cost: int):
        self.user_id = user_id
        self.cost = cost
        super().__init__(
            f"Insufficient credits. You need {cost} credit(s) to generate. Please purchase credits."
        )


class StorageUnavailable(ResumeForgeError):
    """The ledger database could not be reached or the transaction failed.

    Callers must not assume the attempted mutation was applied.
    """

    kind = "StorageUnavailable"
    retryable = True


class GeneratorError(ResumeForgeError):
    """Base class for classified failures of the external generation endpoint."""

    kind = "GeneratorError"
    retryable = True


class Unauthorized(GeneratorError):
    """The generation endpoint rejected the configured credential."""

    kind = "Unauthorized"
    retryable = False


class RateLimited(GeneratorError):
    """The generation endpoint is throttling requests."""

    kind = "RateLimited"


class Unavailable(GeneratorError):
    """Network failure, timeout, or a server-side error from the generation endpoint."""

    kind = "Unavailable"


class MalformedResponse(GeneratorError):
    """A response arrived but did not contain usable tailored text."""

    kind = "MalformedResponse"


class GenerationFailed(ResumeForgeError):
    """A paid generation failed after the credit was debited.

    Attributes:
        cause (GeneratorError): The classified generator failure.
        refunded (bool): Whether the compensating credit was written.

    """

    kind = "GenerationFailed"

    def __init__(self, cause: GeneratorError, refunded: bool = True):
        self.cause = cause
        self.refunded = refunded
        self.retryable = cause.retryable
        super().__init__(f"Generation failed ({cause.kind}): {cause.message}")


class InvalidSignature(ResumeForgeError):
    """A webhook payload failed signature verification."""

    kind = "InvalidSignature"


class MalformedEvent(ResumeForgeError):
    """A verified webhook event lacks the data needed to credit a ledger."""

    kind = "MalformedEvent"


class PaymentsNotConfigured(ResumeForgeError):
    """The payment provider credentials are missing from the settings."""

    kind = "PaymentsNotConfigured"


class CheckoutFailed(ResumeForgeError):
    """The payment provider refused to create a checkout session."""

    kind = "CheckoutFailed"
    retryable = True
