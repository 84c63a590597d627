"""Inference service client (Triton-style generate API)."""

from inbox_assist.inference.client import AsyncInferenceClient, InferenceClient
from inbox_assist.inference.models import GeneratedResponse, GenerationParameters, ModelInfo

__all__ = [
    "AsyncInferenceClient",
    "InferenceClient",
    "GeneratedResponse",
    "GenerationParameters",
    "ModelInfo",
]
