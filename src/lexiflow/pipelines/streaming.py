"""
Streaming document processing over a shared pipeline.

StreamProcessor feeds a lazily produced sequence of documents through a
pipeline and lazily yields the processed documents, in two modes:

    Sequential: documents are processed in blocks on the calling thread.
    Parallel: documents are buffered into batches and each batch is fanned
        out over a thread pool.

In both modes the pipeline read lock is held only while a block or batch is
being processed and is released before any document is handed back to the
consumer, so a slow consumer never keeps a writer (add, remove, update,
replace) waiting. Output order equals input order within each block or
batch. A document whose processing raises is logged and left out of the
output; the rest of its block or batch is unaffected.

Example:
    >>> stream = StreamProcessor(pipeline)
    >>> for doc in stream.process_parallel(read_documents(), max_workers=8):
    ...     index(doc)
"""

from concurrent.futures import Executor, ThreadPoolExecutor
from itertools import islice
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional

from lexiflow.core.config.settings import settings
from lexiflow.core.exceptions.custom_exceptions import ProcessingError
from lexiflow.core.logging.logger import get_logger
from lexiflow.documents.document import Document
from lexiflow.pipelines.monitoring import ThroughputMonitor

if TYPE_CHECKING:
    from lexiflow.pipelines.pipeline import Pipeline

logger = get_logger(__name__)


def _split(items: Iterable[Document], size: int) -> Iterator[List[Document]]:
    iterator = iter(items)
    while True:
        block = list(islice(iterator, size))
        if not block:
            return
        yield block


class StreamProcessor:
    """
    Sequential and parallel batch iteration over a pipeline.

    Attributes:
        pipeline (Pipeline): Pipeline whose stage chain processes documents
        block_size (int): Documents per lock acquisition in sequential mode
        batch_size (int): Documents buffered per fan-out in parallel mode
        report_interval (int): Documents between progress log lines in
            sequential mode; parallel mode logs after every batch
        max_workers (Optional[int]): Default thread pool size
    """

    def __init__(
        self,
        pipeline: "Pipeline",
        block_size: Optional[int] = None,
        batch_size: Optional[int] = None,
        report_interval: Optional[int] = None,
        max_workers: Optional[int] = None,
    ):
        self.pipeline = pipeline
        self.block_size = block_size or settings.STREAM_BLOCK_SIZE
        self.batch_size = batch_size or settings.PARALLEL_BATCH_SIZE
        self.report_interval = report_interval or settings.PROGRESS_REPORT_INTERVAL
        self.max_workers = max_workers or settings.MAX_WORKERS

    def _process_isolated(self, document: Document) -> bool:
        """Run the chain on one document; False if it raised."""
        try:
            self._process_or_raise(document)
            return True
        except ProcessingError as error:
            logger.exception(error.message, error_code=error.error_code, **error.details)
            return False

    def _process_or_raise(self, document: Document) -> None:
        try:
            self.pipeline._process_unlocked(document)
        except Exception as e:
            raise ProcessingError(
                "Error parsing document, dropping it from the output",
                error_code="DOCUMENT_PROCESSING_ERROR",
                details={
                    "document_id": document.document_id,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            ) from e

    def process_sequential(self, documents: Iterable[Document]) -> Iterator[Document]:
        """
        Process documents block by block on the calling thread.

        Args:
            documents (Iterable[Document]): Input documents, consumed lazily

        Yields:
            Document: Successfully processed documents, in input order
        """
        monitor = ThroughputMonitor()
        logger.debug("Started pipeline single thread processing")

        for block in _split(documents, self.block_size):
            processed: List[Document] = []
            with self.pipeline._lock.read():
                for document in block:
                    if not self._process_isolated(document):
                        continue
                    processed.append(document)
                    monitor.record(document)
                    if monitor.documents % self.report_interval == 0:
                        monitor.log_progress(logger)

            yield from processed

    def process_parallel(
        self, documents: Iterable[Document], max_workers: Optional[int] = None
    ) -> Iterator[Document]:
        """
        Process documents in batches fanned out over a thread pool.

        Args:
            documents (Iterable[Document]): Input documents, consumed lazily
            max_workers (Optional[int]): Thread pool size for this call

        Yields:
            Document: Successfully processed documents; each batch is
            yielded in its input order
        """
        monitor = ThroughputMonitor()
        workers = max_workers or self.max_workers

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="lexiflow") as executor:
            buffer: List[Document] = []
            for document in documents:
                buffer.append(document)
                if len(buffer) >= self.batch_size:
                    yield from self._flush(executor, buffer, monitor)
                    buffer = []

            if buffer:
                yield from self._flush(executor, buffer, monitor)

    def _flush(
        self, executor: Executor, buffer: List[Document], monitor: ThroughputMonitor
    ) -> List[Document]:
        with self.pipeline._lock.read():
            outcomes = list(executor.map(self._process_isolated, buffer))

        processed = [doc for doc, ok in zip(buffer, outcomes) if ok]
        for doc in processed:
            monitor.record(doc)
        monitor.log_progress(logger)
        return processed
