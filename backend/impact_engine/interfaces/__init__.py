"""Abstract interfaces for infrastructure abstraction."""

from impact_engine.interfaces.llm_provider import ILLMProvider
from impact_engine.interfaces.ops_data_source import IOpsDataSource

__all__ = [
    "ILLMProvider",
    "IOpsDataSource",
]
