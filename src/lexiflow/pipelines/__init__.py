"""
LexiFlow Pipelines Module - stage chain orchestration and streaming.

Core Components:
    - Pipeline: Ordered, language-scoped stage chain with hot-swappable
      models, persistence and construction helpers
    - StreamProcessor: Sequential and parallel streaming over a Pipeline
    - ThroughputMonitor: Cumulative documents/sentences/tokens counters

Example:
    >>> from lexiflow.pipelines import Pipeline
    >>> nlp = Pipeline.tokenizer_for(Language.ENGLISH)
    >>> for doc in nlp.process(documents):
    ...     print(doc.tokens_count)
"""

from .monitoring import ThroughputMonitor
from .pipeline import (
    PIPELINE_KIND,
    SENTENCE_DETECTOR_KIND,
    TAGGER_KIND,
    Pipeline,
)
from .streaming import StreamProcessor

__all__ = [
    "PIPELINE_KIND",
    "Pipeline",
    "SENTENCE_DETECTOR_KIND",
    "StreamProcessor",
    "TAGGER_KIND",
    "ThroughputMonitor",
]
