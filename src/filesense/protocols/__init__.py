"""Protocol definitions for extensible components."""

from filesense.protocols.engine import InferenceEngine

__all__ = ["InferenceEngine"]
