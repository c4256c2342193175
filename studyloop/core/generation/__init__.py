"""
Content generation.

Strategy registry, chunk retrieval, generation backend and the pipeline
that ties them together.
"""

from studyloop.core.generation.chunk_retriever import ChunkRetriever, combine_chunks
from studyloop.core.generation.generation_backend import GenerationBackend
from studyloop.core.generation.pipeline import GenerationPipeline
from studyloop.core.generation.strategies import build_default_registry
from studyloop.core.generation.strategy_registry import StrategyRegistry

__all__ = [
    "ChunkRetriever",
    "combine_chunks",
    "GenerationBackend",
    "GenerationPipeline",
    "StrategyRegistry",
    "build_default_registry",
]
