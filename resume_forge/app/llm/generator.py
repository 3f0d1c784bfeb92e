import json
import logging
import re
from typing import Any

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.utils.json import parse_json_markdown
from langchain_openai import ChatOpenAI
from openai import (
    APIConnectionError,
    APIStatusError,
    AuthenticationError,
    OpenAI,
    PermissionDeniedError,
    RateLimitError,
)
from pydantic import ValidationError

from resume_forge.app.core.config import Settings
from resume_forge.app.core.exceptions import (
    GeneratorError,
    MalformedResponse,
    RateLimited,
    Unauthorized,
    Unavailable,
)
from resume_forge.app.llm.models import TailoredResume
from resume_forge.app.llm.prompts import (
    INDUSTRY_GUIDANCE_TEMPLATE,
    TAILOR_HUMAN_PROMPT,
    TAILOR_SYSTEM_PROMPT,
)

log = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def _extract_json(text: str) -> Any | None:
    """Parse JSON out of model output, tolerating Markdown fences and surrounding prose.

    Args:
        text (str): Raw model output.

    Returns:
        Any | None: The parsed JSON value, or None if no JSON could be recovered.

    Notes:
        1. Try `parse_json_markdown`, which handles ```json fences.
        2. Fall back to the outermost `{...}` span in the text.

    """
    try:
        return parse_json_markdown(text)
    except (json.JSONDecodeError, ValueError):
        pass

    match = _JSON_OBJECT_RE.search(text)
    if match is None:
        return None
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError:
        return None


def classify_error(error: Exception) -> GeneratorError:
    """Map an exception raised by the generation endpoint client to a failure kind.

    Args:
        error (Exception): The exception raised while calling the endpoint.

    Returns:
        GeneratorError: `Unauthorized`, `RateLimited` or `Unavailable`.

    Notes:
        1. Authentication and permission errors (401/403) are `Unauthorized`.
        2. 429 responses are `RateLimited`.
        3. Connection failures, timeouts, 5xx and any other status are `Unavailable`.

    """
    if isinstance(error, GeneratorError):
        return error
    if isinstance(error, (AuthenticationError, PermissionDeniedError)):
        return Unauthorized("The generation service rejected the configured API key.")
    if isinstance(error, RateLimitError):
        return RateLimited("The generation service is busy. Please try again shortly.")
    if isinstance(error, APIConnectionError):
        return Unavailable("Could not reach the generation service.")
    if isinstance(error, APIStatusError):
        if error.status_code in (401, 403):
            return Unauthorized("The generation service rejected the configured API key.")
        if error.status_code == 429:
            return RateLimited("The generation service is busy. Please try again shortly.")
        return Unavailable(f"The generation service returned HTTP {error.status_code}.")
    return Unavailable(f"The generation service call failed: {error!s}")


def parse_tailored_response(response_text: str) -> TailoredResume:
    """Turn raw model output into a `TailoredResume`.

    Args:
        response_text (str): The text returned by the model.

    Returns:
        TailoredResume: The structured result. `degraded` is True when the output was
            not usable structured JSON and the raw text is returned as tailored text.

    Raises:
        MalformedResponse: If the output is empty, or is a JSON object without a
            non-empty `tailoredResume` string.

    """
    if not response_text or not response_text.strip():
        raise MalformedResponse("The generation service returned no text.")

    parsed = _extract_json(response_text)
    if not isinstance(parsed, dict):
        _msg = "Model output is not a JSON object, returning degraded result"
        log.warning(_msg)
        return TailoredResume(tailored_resume=response_text.strip(), degraded=True)

    tailored = parsed.get("tailoredResume")
    if not isinstance(tailored, str) or not tailored.strip():
        raise MalformedResponse("The generation service response is missing the tailored text.")

    try:
        return TailoredResume.model_validate({**parsed, "degraded": False})
    except ValidationError as e:
        _msg = f"Model output JSON failed validation, returning degraded result: {e!s}"
        log.warning(_msg)
        return TailoredResume(tailored_resume=tailored.strip(), degraded=True)


class GeneratorClient:
    """Client for the external text-generation endpoint.

    The client is built once per process from settings and is not mutated
    afterwards. It never retries: every call is paid for with a credit, so
    retrying is left to the caller.

    Attributes:
        model_name (str): The pinned model identifier.

    """

    def __init__(
        self,
        api_key: str | None,
        model_name: str,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
    ):
        """
        Initialize the client and its LangChain pipeline.

        Args:
            api_key (str | None): Credential for the endpoint. When missing, every call
                fails with `Unauthorized`.
            model_name (str): The pinned model identifier.
            base_url (str | None): OpenAI-compatible base URL of the endpoint.
            timeout_seconds (float | None): Per-request HTTP timeout.

        Returns:
            None

        Notes:
            1. Build the chat prompt from the system and human templates.
            2. Initialize `ChatOpenAI` with `max_retries=0`.
            3. Chain prompt, model and `StrOutputParser` so a call yields raw text.

        """
        _msg = f"Initializing GeneratorClient for model {model_name}"
        log.debug(_msg)
        self.model_name = model_name
        self._chain = None
        if not api_key:
            _msg = "No generation API key configured; generation calls will fail"
            log.warning(_msg)
            return

        prompt = ChatPromptTemplate.from_messages(
            [
                ("system", TAILOR_SYSTEM_PROMPT),
                ("human", TAILOR_HUMAN_PROMPT),
            ]
        )
        llm_params = {
            "model": model_name,
            "temperature": 0.7,
            "api_key": api_key,
            "max_retries": 0,
        }
        if base_url:
            llm_params["base_url"] = base_url
        if timeout_seconds:
            llm_params["timeout"] = timeout_seconds

        llm = ChatOpenAI(**llm_params)
        self._chain = prompt | llm | StrOutputParser()

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeneratorClient":
        """Build a client from application settings."""
        return cls(
            api_key=settings.gemini_api_key,
            model_name=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout_seconds=settings.generation_timeout_seconds,
        )

    async def call(
        self,
        job_description: str,
        resume_section: str,
        section_type: str | None = None,
        industry: str | None = None,
    ) -> TailoredResume:
        """Ask the model to tailor a resume section to a job description.

        Args:
            job_description (str): The target job description.
            resume_section (str): The resume text to tailor.
            section_type (str | None): Optional label for the section, e.g. "experience".
            industry (str | None): Optional industry used to add terminology guidance.

        Returns:
            TailoredResume: The tailored text plus keyword analysis.

        Raises:
            Unauthorized: If no credential is configured or the endpoint rejects it.
            RateLimited: If the endpoint throttles the request.
            Unavailable: On network errors, timeouts, or server-side errors.
            MalformedResponse: If the response carries no usable tailored text.

        Network access:
            - This function makes one request to the generation endpoint.

        """
        _msg = "GeneratorClient.call starting"
        log.debug(_msg)

        if self._chain is None:
            raise Unauthorized("The generation API key is not configured.")

        industry_guidance = (
            INDUSTRY_GUIDANCE_TEMPLATE.format(industry=industry) if industry else ""
        )
        try:
            response_text = await self._chain.ainvoke(
                {
                    "job_description": job_description,
                    "resume_section": resume_section,
                    "section_type": section_type or "general",
                    "industry_guidance": industry_guidance,
                }
            )
        except Exception as e:
            failure = classify_error(e)
            _msg = f"Generation call failed ({failure.kind}): {e!s}"
            log.exception(_msg)
            raise failure from e

        result = parse_tailored_response(response_text)

        _msg = "GeneratorClient.call returning"
        log.debug(_msg)
        return result


def list_generation_models(settings: Settings) -> list[str]:
    """List the model ids available to the configured credential.

    This is the administrative path for rotating the pinned model: an operator
    reviews the list and updates `GEMINI_MODEL`. It is never called while
    serving requests.

    Args:
        settings (Settings): Application settings with the API key and base URL.

    Returns:
        list[str]: Sorted model ids, without any "models/" prefix.

    Raises:
        Unauthorized: If no API key is configured or it is rejected.
        RateLimited: If the endpoint throttles the request.
        Unavailable: If the endpoint cannot be reached.

    Network access:
        - This function makes one request to the models endpoint.

    """
    if not settings.gemini_api_key:
        raise Unauthorized("The generation API key is not configured.")
    client = OpenAI(
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_base_url,
        max_retries=0,
    )
    try:
        models = client.models.list()
    except Exception as e:
        raise classify_error(e) from e
    return sorted(model.id.removeprefix("models/") for model in models)
