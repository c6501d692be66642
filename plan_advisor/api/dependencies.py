"""Dependency injection for FastAPI endpoints"""

import random
from fastapi import Request
from plan_advisor.infrastructure.clients.llm import ChatCompletionClient
from plan_advisor.infrastructure.observability.logging import StructuredDecisionLog


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_decision_log(request: Request) -> StructuredDecisionLog:
    """Engine decision trace bound to the current request"""
    return StructuredDecisionLog(request_id=get_request_id(request))


def get_llm_client() -> ChatCompletionClient:
    """Provide chat completion client instance"""
    return ChatCompletionClient()


def get_rng() -> random.Random:
    """Randomness for local pitch template choice"""
    return random.Random()
