"""
Fluent builder cho MongoDB aggregation pipeline.
"""

from querymaker.lookup_options import LookupOptions
from querymaker.pipeline_builder import PipelineBuilder
from querymaker.pipelines import build_search_pipeline
from querymaker.serialize import pipeline_to_json

__all__ = [
    "LookupOptions",
    "PipelineBuilder",
    "build_search_pipeline",
    "pipeline_to_json",
]
