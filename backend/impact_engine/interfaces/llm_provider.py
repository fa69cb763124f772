"""
LLM provider interface.

Defines the contract for LLM (Large Language Model) access.
Implementations: Gemini API, LiteLLM (for Bedrock, OpenAI, etc.)
"""

from abc import ABC, abstractmethod


class ILLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    def get_model(self) -> str:
        """
        Get the model identifier passed to the underlying client.

        Returns:
            Model identifier (e.g., "gemini-2.0-flash", "openai/gpt-4o")
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """
        Get the human-readable model name.

        Returns:
            Model name string for logging/display
        """
        pass
