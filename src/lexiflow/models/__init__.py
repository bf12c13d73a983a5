"""
Model identity types shared by stages, stores and pipelines.
"""

from .descriptor import LATEST_VERSION, ModelDescriptor, PipelineData

__all__ = ["LATEST_VERSION", "ModelDescriptor", "PipelineData"]
