import logging

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

log = logging.getLogger(__name__)


class Token(BaseModel):
    """Schema for an issued access token.

    Attributes:
        access_token (str): The JWT to send as a bearer token.
        token_type (str): Always "bearer".
        user_id (str): The user id the token authenticates.

    """

    access_token: str
    token_type: str = "bearer"
    user_id: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreditBalanceResponse(BaseModel):
    """Schema for a user's current credit balance."""

    user_id: str
    balance: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
