"""
Training progress record kept by the first training worker.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class HistoryEntry:
    epoch: int
    loss: float
    learning_rate: float
    elapsed_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "epoch": self.epoch,
            "loss": self.loss,
            "learning_rate": self.learning_rate,
            "elapsed_seconds": self.elapsed_seconds,
        }


@dataclass
class TrainingHistory:
    """Append-only list of per-epoch training measurements."""

    entries: List[HistoryEntry] = field(default_factory=list)

    def append(
        self, epoch: int, loss: float, learning_rate: float, elapsed_seconds: float
    ) -> HistoryEntry:
        entry = HistoryEntry(epoch, float(loss), float(learning_rate), float(elapsed_seconds))
        self.entries.append(entry)
        return entry

    @property
    def last(self) -> Optional[HistoryEntry]:
        return self.entries[-1] if self.entries else None

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> Dict[str, Any]:
        return {"entries": [e.to_dict() for e in self.entries]}
