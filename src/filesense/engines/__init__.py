"""Inference engines for the content-type model."""

from filesense.engines.onnx_engine import OnnxInferenceEngine

__all__ = ["OnnxInferenceEngine"]
