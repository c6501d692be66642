"""Sales pitch text for a recommended plan"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from plan_advisor.domain.exceptions import InvalidPitchRequestError


class PitchProvider(str, Enum):
    LOCAL = "local"
    SILICONFLOW = "siliconflow"
    VAPI = "vapi"


@dataclass(frozen=True)
class PitchRequest:
    """Descriptive fields of a recommendation used to write a pitch"""

    phone: str
    current_plan: str
    recommended_plan: str
    recommended_price: int
    recommended_data_gb: int
    recommended_voice_min: int
    reason: str
    provider: PitchProvider = PitchProvider.LOCAL
    api_key: Optional[str] = None
    api_endpoint: Optional[str] = None


SYSTEM_PROMPT = "You are a professional telecom sales consultant who is good at closing deals."


def validate_pitch_request(request: PitchRequest) -> None:
    if not request.current_plan or not request.recommended_plan:
        raise InvalidPitchRequestError("Current and recommended plan are required")


def build_pitch_prompt(request: PitchRequest) -> str:
    """User prompt sent to the language model"""
    return f"""You are a professional telecom sales consultant. Write a sales pitch for a customer.

Customer:
- Phone: {request.phone}
- Current plan: {request.current_plan}
- Recommended plan: {request.recommended_plan} ({request.recommended_price}/month)
- Reason: {request.reason}

Recommended plan details:
- Data: {request.recommended_data_gb} GB
- Voice: {request.recommended_voice_min} minutes

Requirements:
1. Confident, professional and friendly; get straight to the point
2. Highlight what the recommended plan does better than the current one
3. Guide the customer towards a home visit or a store visit to switch
4. Do not ask for the customer's opinion; state the next steps instead
5. Around 150 words, plain natural language

Reply with the pitch only."""


def generate_local_pitch(request: PitchRequest, rng: Optional[random.Random] = None) -> str:
    """
    Fill one of the built-in templates.

    Args:
        request: Recommendation details
        rng: Source of randomness for template choice (seed it for repeatable output)
    """
    rng = rng or random.Random()
    templates = [
        (
            f"Hello {request.phone}, this is your local store's plan advisor. Based on your usage we picked "
            f"{request.recommended_plan} for you. Compared with your current {request.current_plan}, it costs "
            f"{request.recommended_price} a month and gives you {request.recommended_data_gb} GB of data and "
            f"{request.recommended_voice_min} minutes of calls, which covers everything you use. We have reserved "
            f"the plan for you and can switch you over today. Shall we come to you, or will you drop by the store "
            f"tomorrow?"
        ),
        (
            f"Hello, this is your telecom advisor. Looking at your last three months, {request.recommended_plan} "
            f"fits you well: {request.recommended_price} a month with {request.recommended_data_gb} GB of data and "
            f"{request.recommended_voice_min} minutes of calls ({request.reason}). It is better value than your "
            f"current plan with more room to spare. Tell me when suits you and we will come over to set it up."
        ),
        (
            f"Hello {request.phone}, thank you for staying with us. Based on your spending we recommend "
            f"{request.recommended_plan}: only {request.recommended_price}, with {request.recommended_data_gb} GB "
            f"of data and {request.recommended_voice_min} minutes of calls ({request.reason}). It is the best "
            f"option for you right now. Just name a day and our staff will visit to activate it, free of charge."
        ),
    ]
    return rng.choice(templates)
