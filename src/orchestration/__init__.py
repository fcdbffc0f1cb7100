"""Retrieval orchestration: cache-first hybrid search and context assembly."""

from src.orchestration._compressor import ContextCompressor
from src.orchestration._config import load_engine_config
from src.orchestration._metrics import MetricsCollector
from src.orchestration._models import EngineConfig, EngineSettings, RetrievalStats
from src.orchestration._orchestrator import RetrievalOrchestrator

__all__ = [
    "ContextCompressor",
    "EngineConfig",
    "EngineSettings",
    "MetricsCollector",
    "RetrievalOrchestrator",
    "RetrievalStats",
    "load_engine_config",
]
