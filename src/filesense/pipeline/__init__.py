"""Identification pipeline stages."""

from filesense.pipeline.batching import BatchInferenceOrchestrator
from filesense.pipeline.composer import ResultComposer
from filesense.pipeline.fast_path import FastPathClassifier, FastPathDecision, PendingInference
from filesense.pipeline.policy import DecisionPolicy

__all__ = [
    "BatchInferenceOrchestrator",
    "DecisionPolicy",
    "FastPathClassifier",
    "FastPathDecision",
    "PendingInference",
    "ResultComposer",
]
