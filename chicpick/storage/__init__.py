"""Durable wardrobe storage."""

from .repository import (
    DocumentBackend,
    FileDocumentBackend,
    GarmentRecord,
    GarmentStore,
    MemoryDocumentBackend,
)

__all__ = [
    "DocumentBackend",
    "FileDocumentBackend",
    "GarmentRecord",
    "GarmentStore",
    "MemoryDocumentBackend",
]
