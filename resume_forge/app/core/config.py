import logging
from functools import lru_cache

from pydantic import Field, PostgresDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    This class defines all configuration values used by the application,
    including database connection details, token signing, the pinned
    generation model, and the payment provider credentials.
    Values are loaded from environment variables with fallback defaults.

    Attributes:
        database_url (str): Database connection URL. Assembled from the DB_* components
            unless DATABASE_URL is set explicitly.
        secret_key (str): Secret key for signing JWT tokens.
            Must be kept secure and changed in production.
        algorithm (str): Algorithm used for JWT token encoding.
        access_token_expire_minutes (int): Duration in minutes for which access tokens remain valid.
        gemini_api_key (str | None): API key for the Gemini generation endpoint.
        gemini_model (str): The pinned model identifier used for every generation call.
        gemini_base_url (str): Base URL of Gemini's OpenAI-compatible API.
        generation_timeout_seconds (float): Upper bound on a single generation call.
        generation_cost (int): Credits debited per generation.
        stripe_secret_key (str | None): Stripe API secret key.
        stripe_webhook_secret (str | None): Secret used to verify Stripe webhook signatures.
        stripe_price_id (str | None): Default Stripe price for a credit bundle.
        credits_per_purchase (int): Credits granted by one completed checkout.

    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # Database settings
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="resume_forge", validation_alias="DB_NAME")
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: str = Field(default="", validation_alias="DB_PASSWORD")
    database_url_override: str | None = Field(
        default=None,
        validation_alias="DATABASE_URL",
    )

    @computed_field
    @property
    def database_url(self) -> str:
        """
        Database URL, either the explicit override or assembled from components.

        Args:
            None: This property does not take any arguments.

        Returns:
            str: The database connection URL.

        Notes:
            1. If DATABASE_URL is set, it is returned unchanged (this allows SQLite for local runs).
            2. Otherwise a PostgreSQL URL is built from the username, password, host, port and database name.

        """
        if self.database_url_override:
            return self.database_url_override
        return str(
            PostgresDsn.build(
                scheme="postgresql",
                username=self.db_user,
                password=self.db_password,
                host=self.db_host,
                port=self.db_port,
                path=self.db_name,
            )
        )

    # Security settings
    secret_key: str = Field(
        default="your-secret-key-change-in-production",
        validation_alias="SECRET_KEY",
    )
    algorithm: str = Field(default="HS256", validation_alias="ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Generation settings
    gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/",
        validation_alias="GEMINI_BASE_URL",
    )
    generation_timeout_seconds: float = Field(
        default=60.0,
        validation_alias="GENERATION_TIMEOUT_SECONDS",
    )
    generation_cost: int = Field(default=1, validation_alias="GENERATION_COST")

    # Payment settings
    stripe_secret_key: str | None = Field(
        default=None,
        validation_alias="STRIPE_SECRET_KEY",
    )
    stripe_webhook_secret: str | None = Field(
        default=None,
        validation_alias="STRIPE_WEBHOOK_SECRET",
    )
    stripe_price_id: str | None = Field(default=None, validation_alias="STRIPE_PRICE_ID")
    credits_per_purchase: int = Field(default=5, validation_alias="CREDITS_PER_PURCHASE")
    checkout_success_url: str = Field(
        default="https://resumeforgeapp.com?session_id={CHECKOUT_SESSION_ID}",
        validation_alias="CHECKOUT_SUCCESS_URL",
    )
    checkout_cancel_url: str = Field(
        default="https://resumeforgeapp.com",
        validation_alias="CHECKOUT_CANCEL_URL",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get the global settings instance.

    Args:
        None: This function does not take any arguments.

    Returns:
        Settings: The global settings instance, containing all configuration values.

    Raises:
        ValidationError: If environment variables are present but invalid.

    Notes:
        1. Reads configuration from environment variables and the .env file.
        2. The function returns a cached instance to avoid repeated parsing of the .env file.
        3. This function performs disk access to read the .env file on first call.

    """
    return Settings()
