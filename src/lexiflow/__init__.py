"""
LexiFlow - Language-scoped document processing pipelines.

LexiFlow runs documents through an ordered chain of annotation stages
(tokenizer, sentence detector, tagger, entity recognizer), each scoped to a
language, with models that can be replaced while documents are being
processed.

Key Features:
    - Thread-safe stage chain under a reader-writer lock
    - Hot replacement of individual models or of a whole pipeline
    - Streaming over large document collections, sequential or parallel,
      with bounded memory and per-document failure isolation
    - Versioned model persistence with graceful handling of missing models
    - Lookup-table log/sigmoid primitives for trainable stages

Modules:
    core: Configuration, logging, exceptions and locking
    documents: Document model and languages
    models: Model descriptors
    processing: Stage contracts and built-in stages
    storage: Model stores
    pipelines: Pipeline orchestration and streaming
    training: Numeric primitives for training workers
    cli: Command-line interface

Example:
    >>> from lexiflow import Document, Language, Pipeline
    >>> nlp = Pipeline.tokenizer_for(Language.ENGLISH)
    >>> doc = nlp.process_single(Document("Hello world.", Language.ENGLISH))
    >>> print(doc.tokens_count)
"""

__version__ = "0.1.0"
__description__ = (
    "Language-scoped document processing pipelines with hot-swappable models, "
    "parallel streaming and versioned model persistence."
)

from lexiflow.core.config.settings import Settings
from lexiflow.core.logging.logger import get_logger
from lexiflow.documents import Document, Language
from lexiflow.models import ModelDescriptor
from lexiflow.pipelines import Pipeline, StreamProcessor

__all__ = [
    "Document",
    "Language",
    "ModelDescriptor",
    "Pipeline",
    "Settings",
    "StreamProcessor",
    "get_logger",
]
