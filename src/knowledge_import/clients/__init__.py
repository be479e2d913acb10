"""Clients for external services."""

from knowledge_import.clients.completion_client import CompletionClient

__all__ = ["CompletionClient"]
