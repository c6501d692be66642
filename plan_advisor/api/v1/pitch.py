"""POST /v1/pitch - sales pitch for a recommended plan"""

import random
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from plan_advisor.api.v1.schemas import PitchRequestSchema, PitchResponse
from plan_advisor.api.dependencies import get_llm_client, get_request_id, get_rng
from plan_advisor.domain.pitch import PitchProvider, PitchRequest, generate_local_pitch, validate_pitch_request
from plan_advisor.domain.exceptions import InvalidPitchRequestError, PitchGenerationError
from plan_advisor.infrastructure.clients.llm import ChatCompletionClient
from plan_advisor.infrastructure.observability.metrics import pitch_counter

router = APIRouter()


@router.post("/pitch", response_model=PitchResponse)
async def create_pitch(
    request_body: PitchRequestSchema,
    request: Request,
    llm_client: ChatCompletionClient = Depends(get_llm_client),
    rng: random.Random = Depends(get_rng),
):
    """
    Write a sales pitch for a recommendation.

    Uses the built-in templates when the provider is "local" or no API key
    is given, otherwise the provider's language model.
    """
    request_id = get_request_id(request)
    pitch_request = PitchRequest(**request_body.model_dump())

    try:
        validate_pitch_request(pitch_request)

        if pitch_request.provider is PitchProvider.LOCAL or not pitch_request.api_key:
            speech = generate_local_pitch(pitch_request, rng)
            provider = PitchProvider.LOCAL
        else:
            speech = await llm_client.generate_pitch(pitch_request)
            provider = pitch_request.provider

    except InvalidPitchRequestError as e:
        pitch_counter.labels(provider=pitch_request.provider.value, outcome="failure").inc()
        raise HTTPException(status_code=400, detail=str(e))

    except PitchGenerationError as e:
        pitch_counter.labels(provider=pitch_request.provider.value, outcome="failure").inc()
        logging.error(f"Pitch generation failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail=str(e))

    pitch_counter.labels(provider=provider.value, outcome="success").inc()
    return PitchResponse(success=True, speech=speech, provider=provider)
