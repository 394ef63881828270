"""
Repository layer exports.
"""
from app.repositories.base import JsonDocumentStore
from app.repositories.prompt_repository import DEFAULT_MODEL_CONFIG, PromptRepository

__all__ = [
    'JsonDocumentStore',
    'PromptRepository',
    'DEFAULT_MODEL_CONFIG',
]
