import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from openai import (
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    PermissionDeniedError,
    RateLimitError,
)

from resume_forge.app.core.exceptions import (
    MalformedResponse,
    RateLimited,
    Unauthorized,
    Unavailable,
)
from resume_forge.app.llm.generator import (
    GeneratorClient,
    classify_error,
    list_generation_models,
    parse_tailored_response,
)

REQUEST = httpx.Request("POST", "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions")

FULL_RESPONSE = {
    "tailoredResume": "Led Python migration of billing services.",
    "keywordMatches": {"matched": ["python"], "missing": ["kubernetes"], "matchPercentage": 50},
    "improvementTips": [{"tip": "Quantify impact", "category": "achievements", "priority": "high"}],
    "changes": {"added": ["billing"], "modified": ["Led"], "improvements": ["Stronger verb"]},
}


def _status_error(error_cls, status_code):
    return error_cls(
        "upstream error",
        response=httpx.Response(status_code, request=REQUEST),
        body=None,
    )


def test_parse_fenced_json_response():
    text = f"```json\n{json.dumps(FULL_RESPONSE)}\n```"

    result = parse_tailored_response(text)

    assert result.degraded is False
    assert result.tailored_resume == "Led Python migration of billing services."
    assert result.keyword_matches.matched == ["python"]
    assert result.keyword_matches.missing == ["kubernetes"]
    assert result.keyword_matches.match_percentage == 50
    assert result.improvement_tips[0].priority == "high"
    assert result.changes.improvements == ["Stronger verb"]


def test_parse_json_surrounded_by_prose():
    text = f"Here is the tailored section:\n{json.dumps(FULL_RESPONSE)}\nGood luck!"

    result = parse_tailored_response(text)

    assert result.degraded is False
    assert result.tailored_resume == FULL_RESPONSE["tailoredResume"]


def test_parse_plain_text_returns_degraded_result():
    """Non-JSON output falls back to the raw text with empty collections, flagged as degraded."""
    result = parse_tailored_response("Led the migration of billing services to Python.")

    assert result.degraded is True
    assert result.tailored_resume == "Led the migration of billing services to Python."
    assert result.keyword_matches.matched == []
    assert result.keyword_matches.missing == []
    assert result.improvement_tips == []
    assert result.changes.added == []


def test_parse_json_with_invalid_analysis_is_degraded():
    payload = {"tailoredResume": "Tailored text", "improvementTips": ["not", "objects"]}

    result = parse_tailored_response(json.dumps(payload))

    assert result.degraded is True
    assert result.tailored_resume == "Tailored text"
    assert result.improvement_tips == []


@pytest.mark.parametrize("text", ["", "   \n"])
def test_parse_empty_response_is_malformed(text):
    with pytest.raises(MalformedResponse):
        parse_tailored_response(text)


@pytest.mark.parametrize(
    "payload",
    [
        {"keywordMatches": {"matched": []}},
        {"tailoredResume": ""},
        {"tailoredResume": "   "},
        {"tailoredResume": 42},
    ],
)
def test_parse_json_without_tailored_text_is_malformed(payload):
    with pytest.raises(MalformedResponse):
        parse_tailored_response(json.dumps(payload))


@pytest.mark.parametrize(
    "error, expected",
    [
        (_status_error(AuthenticationError, 401), Unauthorized),
        (_status_error(PermissionDeniedError, 403), Unauthorized),
        (_status_error(RateLimitError, 429), RateLimited),
        (_status_error(InternalServerError, 500), Unavailable),
        (_status_error(InternalServerError, 503), Unavailable),
        (_status_error(BadRequestError, 400), Unavailable),
        (APIConnectionError(request=REQUEST), Unavailable),
        (APITimeoutError(request=REQUEST), Unavailable),
        (RuntimeError("boom"), Unavailable),
    ],
)
def test_classify_error(error, expected):
    assert isinstance(classify_error(error), expected)


def test_classify_error_passes_through_classified_errors():
    error = RateLimited("slow down")
    assert classify_error(error) is error


def test_client_builds_chain_without_retries():
    with (
        patch("resume_forge.app.llm.generator.ChatOpenAI") as mock_chat_openai,
        patch("resume_forge.app.llm.generator.ChatPromptTemplate") as mock_prompt_template,
        patch("resume_forge.app.llm.generator.StrOutputParser"),
    ):
        mock_prompt = MagicMock()
        mock_prompt_template.from_messages.return_value = mock_prompt

        client = GeneratorClient(
            api_key="key",
            model_name="gemini-2.5-flash",
            base_url="https://example.test/openai/",
            timeout_seconds=30,
        )

    mock_chat_openai.assert_called_once_with(
        model="gemini-2.5-flash",
        temperature=0.7,
        api_key="key",
        max_retries=0,
        base_url="https://example.test/openai/",
        timeout=30,
    )
    assert client.model_name == "gemini-2.5-flash"
    assert client._chain is not None


def test_client_from_settings_uses_pinned_model(settings):
    with (
        patch("resume_forge.app.llm.generator.ChatOpenAI") as mock_chat_openai,
        patch("resume_forge.app.llm.generator.ChatPromptTemplate"),
    ):
        client = GeneratorClient.from_settings(settings)

    assert client.model_name == settings.gemini_model
    kwargs = mock_chat_openai.call_args.kwargs
    assert kwargs["model"] == settings.gemini_model
    assert kwargs["base_url"] == settings.gemini_base_url
    assert kwargs["max_retries"] == 0


@pytest.mark.asyncio
async def test_call_without_api_key_is_unauthorized():
    client = GeneratorClient(api_key=None, model_name="gemini-2.5-flash")

    with pytest.raises(Unauthorized):
        await client.call("job", "resume")


@pytest.fixture
def client_with_chain():
    with (
        patch("resume_forge.app.llm.generator.ChatOpenAI"),
        patch("resume_forge.app.llm.generator.ChatPromptTemplate"),
    ):
        client = GeneratorClient(api_key="key", model_name="gemini-2.5-flash")
    client._chain = MagicMock()
    client._chain.ainvoke = AsyncMock(return_value=json.dumps(FULL_RESPONSE))
    return client


@pytest.mark.asyncio
async def test_call_returns_parsed_result(client_with_chain):
    result = await client_with_chain.call(
        job_description="Python engineer",
        resume_section="Wrote code",
        section_type="experience",
        industry="fintech",
    )

    assert result.tailored_resume == FULL_RESPONSE["tailoredResume"]
    variables = client_with_chain._chain.ainvoke.call_args.args[0]
    assert variables["job_description"] == "Python engineer"
    assert variables["resume_section"] == "Wrote code"
    assert variables["section_type"] == "experience"
    assert "Industry Context: fintech." in variables["industry_guidance"]


@pytest.mark.asyncio
async def test_call_defaults_section_type_and_omits_industry(client_with_chain):
    await client_with_chain.call(job_description="job", resume_section="resume")

    variables = client_with_chain._chain.ainvoke.call_args.args[0]
    assert variables["section_type"] == "general"
    assert variables["industry_guidance"] == ""


@pytest.mark.asyncio
async def test_call_classifies_upstream_errors(client_with_chain):
    client_with_chain._chain.ainvoke = AsyncMock(side_effect=_status_error(RateLimitError, 429))

    with pytest.raises(RateLimited):
        await client_with_chain.call("job", "resume")
    client_with_chain._chain.ainvoke.assert_awaited_once()


@pytest.mark.asyncio
async def test_call_empty_response_is_malformed(client_with_chain):
    client_with_chain._chain.ainvoke = AsyncMock(return_value="")

    with pytest.raises(MalformedResponse):
        await client_with_chain.call("job", "resume")


def test_list_generation_models(settings):
    with patch("resume_forge.app.llm.generator.OpenAI") as mock_openai:
        mock_openai.return_value.models.list.return_value = [
            SimpleNamespace(id="models/gemini-2.5-pro"),
            SimpleNamespace(id="models/gemini-2.5-flash"),
        ]
        model_ids = list_generation_models(settings)

    assert model_ids == ["gemini-2.5-flash", "gemini-2.5-pro"]
    mock_openai.assert_called_once_with(
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_base_url,
        max_retries=0,
    )


def test_list_generation_models_classifies_errors(settings):
    with patch("resume_forge.app.llm.generator.OpenAI") as mock_openai:
        mock_openai.return_value.models.list.side_effect = _status_error(AuthenticationError, 401)
        with pytest.raises(Unauthorized):
            list_generation_models(settings)


def test_list_generation_models_requires_key(settings):
    settings.gemini_api_key = None
    with pytest.raises(Unauthorized):
        list_generation_models(settings)
