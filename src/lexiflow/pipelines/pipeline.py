"""
Pipeline orchestrator.

A Pipeline owns an ordered chain of stages (Process instances) and a map of
per-language neuralyzers, both guarded by one reader-writer lock. Readers
(process_single, streaming, listing queries) share the lock; structural
changes (add, remove, update, replace, neuralyzer changes) take it
exclusively, so concurrent readers always observe a complete chain, either
the one before or the one after a change.

Processing a document:
    1. Empty documents are returned untouched.
    2. Each stage runs in chain order, skipped when both the stage and the
       document carry concrete languages that differ.
    3. The wildcard neuralyzer runs, then the document-language neuralyzer.

Persistence:
    A pipeline is stored as the list of its stages' descriptors, at most one
    per family (first one wins). Reconstruction from a store drops
    descriptors whose artifact is missing, keeps the first stage loaded per
    family, and inserts a default tokenizer at the head if no tokenizer
    survived.

Example:
    >>> nlp = Pipeline.for_language(Language.ENGLISH, tagger=False)
    >>> nlp.add(entity_recognizer)
    >>> doc = nlp.process_single(Document("Marie Curie was born in Warsaw.", Language.ENGLISH))
    >>> nlp.store()
    >>> same = Pipeline.from_store(Language.ENGLISH, version=0, tag="")
"""

import asyncio
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from lexiflow.core.concurrency import ReaderWriterLock
from lexiflow.core.exceptions.custom_exceptions import (
    InvalidOperationError,
    LexiFlowError,
    ModelNotFoundError,
    PipelineError,
    StorageError,
)
from lexiflow.core.logging.logger import get_logger
from lexiflow.documents.document import Document
from lexiflow.documents.language import Language
from lexiflow.models.descriptor import LATEST_VERSION, ModelDescriptor, PipelineData
from lexiflow.pipelines.streaming import StreamProcessor
from lexiflow.processing.base import (
    EntityRecognizer,
    HasSpecialCases,
    Process,
    Tokenizer,
)
from lexiflow.processing.neuralyzer import Neuralyzer
from lexiflow.processing.tokenizer import FastTokenizer, TokenizationException
from lexiflow.storage import ModelStore, get_default_store

logger = get_logger(__name__)

PIPELINE_KIND = "Pipeline"
SENTENCE_DETECTOR_KIND = "SentenceDetector"
TAGGER_KIND = "AveragePerceptronTagger"


class Pipeline:
    """
    Ordered, language-scoped chain of stages under a reader-writer lock.

    Attributes:
        language (Language): Language of the pipeline (ANY for multilingual)
        version (int): Pipeline version, part of its stored identity
        tag (str): Pipeline variant tag
        data (PipelineData): Persisted descriptor list, rebuilt by store()

    Stages are owned by the pipeline that holds them; do not add the same
    stage instance to two pipelines.
    """

    def __init__(
        self,
        processes: Optional[Iterable[Process]] = None,
        language: Language = Language.ANY,
        version: int = 0,
        tag: str = "",
    ):
        self.language = Language.parse(language)
        self.version = version
        self.tag = tag
        self.data = PipelineData()
        self._processes: List[Process] = list(processes or [])
        self._neuralyzers: Dict[Language, Neuralyzer] = {}
        self._lock = ReaderWriterLock()

    @property
    def descriptor(self) -> ModelDescriptor:
        return ModelDescriptor(
            language=self.language, kind=PIPELINE_KIND, tag=self.tag, version=self.version
        )

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._processes)

    def __repr__(self) -> str:
        return (
            f"Pipeline(language={self.language.value!r}, version={self.version}, "
            f"tag={self.tag!r}, stages={len(self)})"
        )

    # ------------------------------------------------------------------
    # Chain mutation
    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_process(process: object) -> Process:
        if not isinstance(process, Process):
            raise InvalidOperationError(
                f"Not a pipeline stage: {type(process).__name__}",
                error_code="INVALID_PROCESS",
            )
        return process

    def _try_import_special_cases(self, process: Process) -> None:
        # Caller holds the write lock
        if not isinstance(process, HasSpecialCases):
            return
        for stage in self._processes:
            if stage is process or not isinstance(stage, Tokenizer):
                continue
            if process.language.matches(stage.language):
                stage.import_special_cases(process)

    def add(self, process: Process) -> "Pipeline":
        """Append a stage to the end of the chain."""
        self._ensure_process(process)
        with self._lock.write():
            self._processes.append(process)
            self._try_import_special_cases(process)
        return self

    def add_to_begin(self, process: Process) -> "Pipeline":
        """Insert a stage at the head of the chain."""
        self._ensure_process(process)
        with self._lock.write():
            self._processes.insert(0, process)
            self._try_import_special_cases(process)
        return self

    def remove_all(self, predicate: Callable[[Process], bool]) -> int:
        """
        Remove every stage matching the predicate.

        Returns:
            int: Number of stages removed
        """
        with self._lock.write():
            before = len(self._processes)
            self._processes = [p for p in self._processes if not predicate(p)]
            return before - len(self._processes)

    def replace_with(self, other: "Pipeline") -> None:
        """
        Atomically take over another pipeline's stages.

        Copies the other pipeline's persisted descriptor list, stage list and
        version. Readers of this pipeline see either the old chain or the new
        one, never a mix.
        """
        if other is self:
            return
        with other._lock.read():
            processes = list(other._processes)
            data = PipelineData(list(other.data.processes))
            version = other.version

        with self._lock.write():
            self.data = data
            self._processes = processes
            self.version = version

        logger.info(
            f"Replaced pipeline stages, now at version {version} with {len(processes)} stages"
        )

    def add_special_case(self, word: str, exception: TokenizationException) -> None:
        """Register a tokenization special case with every tokenizer stage."""
        with self._lock.write():
            for stage in self._processes:
                if isinstance(stage, Tokenizer):
                    stage.add_special_case(word, exception)

    # ------------------------------------------------------------------
    # Neuralyzers
    # ------------------------------------------------------------------

    def use_neuralyzer(self, neuralyzer: Neuralyzer) -> "Pipeline":
        """Set the neuralyzer for its language, replacing any previous one."""
        with self._lock.write():
            self._neuralyzers[neuralyzer.language] = neuralyzer
        return self

    def use_neuralyzers(self, neuralyzers: Iterable[Neuralyzer]) -> "Pipeline":
        """Replace all neuralyzers; a later entry wins for a repeated language."""
        with self._lock.write():
            self._neuralyzers.clear()
            for neuralyzer in neuralyzers:
                self._neuralyzers[neuralyzer.language] = neuralyzer
        return self

    def remove_all_neuralyzers(self) -> None:
        with self._lock.write():
            self._neuralyzers.clear()

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process_single(self, document: Document) -> Document:
        """
        Run the stage chain and neuralyzers on one document, in place.

        Args:
            document (Document): Document to annotate

        Returns:
            Document: The same document instance
        """
        with self._lock.read():
            return self._process_unlocked(document)

    def _process_unlocked(self, document: Document) -> Document:
        # Caller holds the read lock
        if len(document) == 0:
            return document

        for stage in self._processes:
            if not stage.language.matches(document.language):
                continue
            stage.process(document)

        neuralyzer_any = self._neuralyzers.get(Language.ANY)
        if neuralyzer_any is not None:
            neuralyzer_any.process(document)
        # A wildcard document gets the wildcard neuralyzer once, not a second
        # time as its own language
        if document.language is not Language.ANY:
            neuralyzer_lang = self._neuralyzers.get(document.language)
            if neuralyzer_lang is not None:
                neuralyzer_lang.process(document)

        return document

    def process(
        self, documents: Iterable[Document], max_workers: Optional[int] = None
    ) -> Iterator[Document]:
        """Stream documents through the chain in parallel batches."""
        return StreamProcessor(self).process_parallel(documents, max_workers=max_workers)

    def process_single_thread(self, documents: Iterable[Document]) -> Iterator[Document]:
        """Stream documents through the chain block by block on this thread."""
        return StreamProcessor(self).process_sequential(documents)

    # ------------------------------------------------------------------
    # Model queries and updates
    # ------------------------------------------------------------------

    def get_models_list(self) -> List[Process]:
        with self._lock.read():
            return list(self._processes)

    def get_models_descriptions(self) -> List[ModelDescriptor]:
        with self._lock.read():
            return [p.descriptor for p in self._processes]

    def get_possible_entity_types(self) -> List[Tuple[ModelDescriptor, List[str]]]:
        """Entity types each entity recognizer stage can produce."""
        with self._lock.read():
            return [
                (p.descriptor, list(p.produces()))
                for p in self._processes
                if isinstance(p, EntityRecognizer)
            ]

    def has_model(self, model: ModelDescriptor, match_version: bool = True) -> bool:
        with self._lock.read():
            return any(
                p.descriptor.same_family(model)
                and (not match_version or p.version == model.version)
                for p in self._processes
            )

    def has_model_to_update(self, new_model: ModelDescriptor) -> bool:
        """True if a stage of the same family has a strictly lower version."""
        with self._lock.read():
            return any(
                p.descriptor.same_family(new_model) and p.version < new_model.version
                for p in self._processes
            )

    def update_model(self, new_model: ModelDescriptor, model_to_be_updated: object) -> bool:
        """
        Replace an outdated stage in place, keeping its chain position.

        The first stage of the same family with a version lower than
        new_model.version is replaced.

        Args:
            new_model (ModelDescriptor): Identity of the replacement
            model_to_be_updated (object): The replacement stage

        Returns:
            bool: True if a stage was replaced

        Raises:
            InvalidOperationError: If the replacement is not a Process; the
                chain is left untouched
        """
        if not isinstance(model_to_be_updated, Process):
            raise InvalidOperationError(
                "Invalid model to update",
                error_code="INVALID_MODEL_UPDATE",
                details={"model": str(new_model), "type": type(model_to_be_updated).__name__},
            )

        with self._lock.write():
            for index, stage in enumerate(self._processes):
                if stage.descriptor.same_family(new_model) and stage.version < new_model.version:
                    self._processes[index] = model_to_be_updated
                    logger.info(f"Updated {stage.descriptor} to {new_model}")
                    return True
        return False

    def remove_model(self, model: ModelDescriptor) -> bool:
        """Remove every stage of the model's family, whatever its version."""
        return self.remove_all(lambda p: p.descriptor.same_family(model)) > 0

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def store(self, store: Optional[ModelStore] = None) -> None:
        """
        Persist the pipeline's descriptor list.

        The list is rebuilt from the current stages with one descriptor per
        family (first occurrence wins); the stage models themselves are not
        written.
        """
        store = store or get_default_store()
        with self._lock.write():
            families = set()
            descriptors = []
            for stage in self._processes:
                descriptor = stage.descriptor
                if descriptor.family in families:
                    continue
                families.add(descriptor.family)
                descriptors.append(descriptor)
            self.data = PipelineData(descriptors)
            data = PipelineData(list(descriptors))
            pipeline_descriptor = self.descriptor

        store.save(pipeline_descriptor, data)
        logger.info(f"Stored pipeline {pipeline_descriptor} with {len(descriptors)} models")

    async def store_async(self, store: Optional[ModelStore] = None) -> None:
        await asyncio.to_thread(self.store, store)

    @staticmethod
    def _load_data(store: ModelStore, descriptor: ModelDescriptor) -> PipelineData:
        data = store.load(descriptor)
        if isinstance(data, dict):
            data = PipelineData.from_dict(data)
        if not isinstance(data, PipelineData):
            raise PipelineError(
                f"Stored object for {descriptor} is not a pipeline record",
                error_code="PIPELINE_DECODE_ERROR",
                details={"type": type(data).__name__},
            )
        return data

    @classmethod
    def from_store(
        cls,
        language: Language,
        version: int = 0,
        tag: str = "",
        store: Optional[ModelStore] = None,
    ) -> "Pipeline":
        """
        Reconstruct a stored pipeline.

        Missing models are dropped from the persisted descriptor list; a
        model that vanished between the existence check and the load is
        dropped and logged as an error. Only the first model loaded per
        family is kept. If no tokenizer survives, a FastTokenizer for the
        pipeline language is inserted at the head.

        Raises:
            ModelNotFoundError: If the pipeline record itself is missing
            PipelineError: If the stored record is not a pipeline record
        """
        store = store or get_default_store()
        pipeline = cls(language=language, version=version, tag=tag)
        descriptor = store.resolve(pipeline.descriptor)
        pipeline.version = descriptor.version
        data = cls._load_data(store, descriptor)

        families = set()
        kept: List[ModelDescriptor] = []
        for model in data.processes:
            if not store.exists(model):
                logger.info(f"Model not in store, removing it from the pipeline: {model}")
                continue
            if model.family in families:
                logger.debug(f"Skipping duplicate model family: {model}")
                continue
            try:
                process = store.load(model)
            except ModelNotFoundError:
                logger.error(f"Model not found on disk, ignoring: {model}")
                continue
            if not isinstance(process, Process):
                logger.error(
                    f"Stored object is not a pipeline stage, ignoring: {model}",
                    type=type(process).__name__,
                )
                continue
            families.add(model.family)
            kept.append(model)
            pipeline.add(process)

        pipeline.data = PipelineData(kept)

        if not any(isinstance(p, Tokenizer) for p in pipeline.get_models_list()):
            pipeline.add_to_begin(FastTokenizer(pipeline.language))

        logger.info(
            f"Loaded pipeline {descriptor} with {len(pipeline)} stages",
            dropped=len(data.processes) - len(kept),
        )
        return pipeline

    @classmethod
    async def from_store_async(
        cls,
        language: Language,
        version: int = 0,
        tag: str = "",
        store: Optional[ModelStore] = None,
    ) -> "Pipeline":
        return await asyncio.to_thread(cls.from_store, language, version, tag, store)

    @classmethod
    def check_if_has_model(
        cls,
        language: Language,
        version: int,
        tag: str,
        model: ModelDescriptor,
        match_version: bool = True,
        store: Optional[ModelStore] = None,
    ) -> bool:
        """Query a stored pipeline's descriptor list without loading its stages."""
        store = store or get_default_store()
        descriptor = ModelDescriptor(Language.parse(language), PIPELINE_KIND, tag, version)
        data = cls._load_data(store, descriptor)
        return any(
            p.same_family(model) and (not match_version or p.version == model.version)
            for p in data.processes
        )

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _load_stage(store: ModelStore, language: Language, kind: str, tag: str = "") -> Process:
        descriptor = ModelDescriptor(language, kind, tag, LATEST_VERSION)
        process = store.load(descriptor)
        if not isinstance(process, Process):
            raise StorageError(
                f"Stored object for {descriptor.without_version()} is not a pipeline stage",
                error_code="MODEL_DECODE_ERROR",
                details={"type": type(process).__name__},
            )
        return process

    @classmethod
    def _stages_for(
        cls, store: ModelStore, language: Language, sentence_detector: bool, tagger: bool
    ) -> List[Process]:
        stages: List[Process] = [FastTokenizer(language)]
        if sentence_detector:
            stages.append(cls._load_stage(store, language, SENTENCE_DETECTOR_KIND))
        if tagger:
            stages.append(cls._load_stage(store, language, TAGGER_KIND))
        return stages

    @classmethod
    def for_language(
        cls,
        language: Language,
        sentence_detector: bool = True,
        tagger: bool = True,
        store: Optional[ModelStore] = None,
    ) -> "Pipeline":
        """
        Build a tokenizer + sentence detector + tagger pipeline.

        Raises:
            ModelNotFoundError: If a requested model is not in the store
        """
        store = store or get_default_store()
        language = Language.parse(language)
        pipeline = cls(language=language)
        for stage in cls._stages_for(store, language, sentence_detector, tagger):
            pipeline.add(stage)
        return pipeline

    @classmethod
    async def for_language_async(
        cls,
        language: Language,
        sentence_detector: bool = True,
        tagger: bool = True,
        store: Optional[ModelStore] = None,
    ) -> "Pipeline":
        return await asyncio.to_thread(
            cls.for_language, language, sentence_detector, tagger, store
        )

    @classmethod
    def for_languages(
        cls,
        languages: Iterable[Language],
        sentence_detector: bool = True,
        tagger: bool = True,
        store: Optional[ModelStore] = None,
    ) -> "Pipeline":
        """Build a multilingual pipeline with one set of stages per language."""
        store = store or get_default_store()
        stages: List[Process] = []
        for language in languages:
            stages.extend(
                cls._stages_for(store, Language.parse(language), sentence_detector, tagger)
            )
        return cls(stages, language=Language.ANY)

    @classmethod
    def tokenizer_for(cls, language: Language, store: Optional[ModelStore] = None) -> "Pipeline":
        """
        Build a tokenizer + sentence detector pipeline that never fails on
        a missing sentence detector model.

        The language's sentence detector is used when available (English
        for the wildcard language), then the English one; if neither can be
        loaded the pipeline only tokenizes.
        """
        store = store or get_default_store()
        language = Language.parse(language)
        pipeline = cls(language=language)
        pipeline.add(FastTokenizer(language))

        primary = Language.ENGLISH if language is Language.ANY else language
        candidates = [primary]
        if primary is not Language.ENGLISH:
            candidates.append(Language.ENGLISH)

        for candidate in candidates:
            try:
                pipeline.add(cls._load_stage(store, candidate, SENTENCE_DETECTOR_KIND))
                break
            except LexiFlowError as e:
                logger.warning(
                    f"Could not find sentence detector model for language {candidate.value}",
                    error=e.message,
                )
        else:
            logger.warning(
                f"No sentence detector available for {language.value}, continuing without one"
            )

        return pipeline
