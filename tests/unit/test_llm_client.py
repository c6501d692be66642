"""Unit tests for the chat completion client"""

import asyncio
import json
import httpx
import pytest
from plan_advisor.domain.pitch import PitchProvider, PitchRequest
from plan_advisor.domain.exceptions import InvalidPitchRequestError, PitchGenerationError
from plan_advisor.infrastructure.clients.llm import ChatCompletionClient
from plan_advisor.config import settings


def _request(**overrides) -> PitchRequest:
    fields = dict(
        phone="13800000001",
        current_plan="Standard 79",
        recommended_plan="Premium",
        recommended_price=129,
        recommended_data_gb=30,
        recommended_voice_min=500,
        reason="one tier up + resources match",
        provider=PitchProvider.SILICONFLOW,
        api_key="sk-test",
    )
    fields.update(overrides)
    return PitchRequest(**fields)


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_generate_pitch_success():
    """Test request shape and content extraction"""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion("  Switch to Premium today.  "))

    client = ChatCompletionClient(transport=httpx.MockTransport(handler))
    speech = asyncio.run(client.generate_pitch(_request()))

    assert speech == "Switch to Premium today."
    assert seen["url"] == settings.siliconflow_endpoint
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == settings.siliconflow_model
    assert seen["body"]["messages"][1]["role"] == "user"
    assert "Premium" in seen["body"]["messages"][1]["content"]


def test_generate_pitch_custom_endpoint():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["model"] = json.loads(request.content)["model"]
        return httpx.Response(200, json=_completion("Pitch"))

    client = ChatCompletionClient(transport=httpx.MockTransport(handler))
    request = _request(provider=PitchProvider.VAPI, api_endpoint="https://llm.example.com/v1/chat/completions")
    asyncio.run(client.generate_pitch(request))

    assert seen["url"] == "https://llm.example.com/v1/chat/completions"
    assert seen["model"] == settings.vapi_model


def test_generate_pitch_http_error():
    client = ChatCompletionClient(transport=httpx.MockTransport(lambda r: httpx.Response(401, json={"message": "bad key"})))

    with pytest.raises(PitchGenerationError, match="401"):
        asyncio.run(client.generate_pitch(_request()))


def test_generate_pitch_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = ChatCompletionClient(timeout=1.0, transport=httpx.MockTransport(handler))

    with pytest.raises(PitchGenerationError, match="timeout"):
        asyncio.run(client.generate_pitch(_request()))


@pytest.mark.parametrize("body", [_completion(""), {"choices": []}, {"unexpected": True}])
def test_generate_pitch_empty_or_malformed(body):
    client = ChatCompletionClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=body)))

    with pytest.raises(PitchGenerationError):
        asyncio.run(client.generate_pitch(_request()))


def test_generate_pitch_requires_key_and_remote_provider():
    client = ChatCompletionClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=_completion("x"))))

    with pytest.raises(InvalidPitchRequestError):
        asyncio.run(client.generate_pitch(_request(api_key=None)))

    with pytest.raises(InvalidPitchRequestError):
        asyncio.run(client.generate_pitch(_request(provider=PitchProvider.LOCAL)))
