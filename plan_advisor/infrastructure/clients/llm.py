"""Chat-completions HTTP client for generating sales pitches"""

import httpx
from typing import Dict, Optional, Tuple
from plan_advisor.domain.pitch import (
    PitchProvider,
    PitchRequest,
    SYSTEM_PROMPT,
    build_pitch_prompt,
    validate_pitch_request,
)
from plan_advisor.domain.exceptions import InvalidPitchRequestError, PitchGenerationError
from plan_advisor.infrastructure.observability.metrics import llm_latency_histogram
from plan_advisor.config import settings


class ChatCompletionClient:
    """Client for OpenAI-compatible chat completion APIs"""

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport
        self.providers: Dict[PitchProvider, Tuple[str, str]] = {
            PitchProvider.SILICONFLOW: (settings.siliconflow_endpoint, settings.siliconflow_model),
            PitchProvider.VAPI: (settings.vapi_endpoint, settings.vapi_model),
        }

    def _resolve(self, request: PitchRequest) -> Tuple[str, str]:
        if request.provider not in self.providers:
            raise InvalidPitchRequestError(f"Unsupported pitch provider: {request.provider.value}")
        endpoint, model = self.providers[request.provider]
        return request.api_endpoint or endpoint, model

    async def generate_pitch(self, request: PitchRequest) -> str:
        """
        Ask the provider's model for a sales pitch.

        Raises:
            InvalidPitchRequestError: Missing API key, plan names or unknown provider
            PitchGenerationError: On timeout, HTTP errors, or empty/invalid response
        """
        if not request.api_key:
            raise InvalidPitchRequestError("API key is required")
        validate_pitch_request(request)
        endpoint, model = self._resolve(request)

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_pitch_prompt(request)},
            ],
            "temperature": settings.llm_temperature,
            "max_tokens": settings.llm_max_tokens,
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with llm_latency_histogram.time():
                    response = await client.post(
                        endpoint,
                        json=payload,
                        headers={"Authorization": f"Bearer {request.api_key}"},
                    )
                response.raise_for_status()
                data = response.json()
                speech: Optional[str] = data["choices"][0]["message"]["content"]

            except httpx.TimeoutException as e:
                raise PitchGenerationError(f"Pitch API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise PitchGenerationError(f"Pitch API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise PitchGenerationError(f"Pitch API unreachable: {e}") from e
            except (KeyError, IndexError, ValueError, TypeError) as e:
                raise PitchGenerationError(f"Invalid response from pitch API: {e}") from e

        if not speech or not speech.strip():
            raise PitchGenerationError("Pitch API returned empty content")
        return speech.strip()
