"""
Throughput metrics for document streaming.
"""
import time
from dataclasses import dataclass, field
from typing import Any, Dict

from lexiflow.documents.document import Document


@dataclass
class ThroughputMonitor:
    """
    Cumulative counters for one streaming call.

    Not thread-safe: streaming records documents from the consuming thread
    only, after a block or batch has been processed.
    """

    documents: int = 0
    spans: int = 0
    tokens: int = 0
    started_at: float = field(default_factory=time.perf_counter)

    def record(self, document: Document) -> None:
        self.documents += 1
        self.spans += document.spans_count
        self.tokens += document.tokens_count

    @property
    def elapsed_seconds(self) -> float:
        return time.perf_counter() - self.started_at

    @property
    def tokens_per_second(self) -> float:
        elapsed = self.elapsed_seconds
        return self.tokens / elapsed if elapsed > 0 else 0.0

    @property
    def kilo_tokens_per_second(self) -> float:
        return self.tokens_per_second / 1000

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documents": self.documents,
            "spans": self.spans,
            "tokens": self.tokens,
            "elapsed_seconds": round(self.elapsed_seconds, 2),
            "tokens_per_second": round(self.tokens_per_second, 1),
        }

    def log_progress(self, logger) -> None:
        logger.info(
            f"Parsed {self.documents:,} documents, {self.spans:,} sentences and "
            f"{self.tokens:,} tokens in {self.elapsed_seconds:.2f} seconds at "
            f"{self.kilo_tokens_per_second:,.0f} kTokens/second",
            **self.to_dict(),
        )
