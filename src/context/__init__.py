"""Context assembly — conversation history, semantic memory and environment."""

from src.context.assembler import (
    AssemblerConfig,
    AssemblyTimeout,
    ContextAssembler,
    ContextAssemblyError,
    ThreadStorageUnavailable,
    VectorStoreUnavailable,
)
from src.context.packet import ContextPacket, SalienceWeights

__all__ = [
    "AssemblerConfig",
    "AssemblyTimeout",
    "ContextAssembler",
    "ContextAssemblyError",
    "ContextPacket",
    "SalienceWeights",
    "ThreadStorageUnavailable",
    "VectorStoreUnavailable",
]
