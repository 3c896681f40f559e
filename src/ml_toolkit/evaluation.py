"""Confusion matrices and per-label metrics for classified corpora."""

from __future__ import annotations

from .corpus import Corpus
from .counters import NestedCounter
from .errors import NullArgumentError

_SPLITS = {"train": "training", "test": "testing"}


def split_name(split: str) -> str:
    """``"train"`` -> ``"training"``, ``"test"`` -> ``"testing"``."""
    try:
        return _SPLITS[split]
    except KeyError:
        raise ValueError(f"split must be one of {sorted(_SPLITS)}, got {split!r}") from None


class ConfusionMatrix:
    """Counts of (true label, system label) pairs over a classified corpus.

    Rows are gold labels, columns are system output. Labels from both sides
    are included so that a label the system never predicts still gets a
    column.

    Args:
        corpus: A corpus whose documents have all been classified.
        split: ``"train"`` or ``"test"``.

    Raises:
        UnclassifiedDocumentError: If a document has no system label.
    """

    def __init__(self, corpus: Corpus, split: str = "test") -> None:
        if corpus is None:
            raise NullArgumentError("corpus", "ConfusionMatrix()")
        self.split = split
        self._name = split_name(split)
        self._counts: NestedCounter[str] = NestedCounter()
        for doc in corpus:
            self._counts.increment(doc.true_label, doc.system_label)

    @property
    def labels(self) -> list[str]:
        return sorted(self._counts.all_keys())

    def get(self, true_label: str, system_label: str) -> int:
        return self._counts.get(true_label, system_label)

    @property
    def total(self) -> int:
        return sum(count for _, count in self._counts.items())

    @property
    def correct(self) -> int:
        return sum(self.get(label, label) for label in self.labels)

    @property
    def accuracy(self) -> float:
        total = self.total
        return self.correct / total if total else 0.0

    def per_class_metrics(self) -> dict[str, dict[str, float]]:
        """Precision, recall, F1, and support for each label."""
        labels = self.labels
        metrics: dict[str, dict[str, float]] = {}
        for label in labels:
            tp = self.get(label, label)
            fp = sum(self.get(other, label) for other in labels if other != label)
            fn = sum(self.get(label, other) for other in labels if other != label)

            precision = tp / (tp + fp) if (tp + fp) > 0 else 0.0
            recall = tp / (tp + fn) if (tp + fn) > 0 else 0.0
            f1 = (
                2 * precision * recall / (precision + recall)
                if (precision + recall) > 0
                else 0.0
            )
            metrics[label] = {
                "precision": precision,
                "recall": recall,
                "f1": f1,
                "support": tp + fn,
            }
        return metrics

    def to_dict(self) -> dict:
        labels = self.labels
        return {
            "split": self.split,
            "accuracy": round(self.accuracy, 4),
            "labels": labels,
            "matrix": {t: {s: self.get(t, s) for s in labels} for t in labels},
        }

    def __str__(self) -> str:
        if not self._counts:
            return f"Confusion Matrix for {self.split} not utilized."
        labels = self.labels
        lines = [
            f"Confusion matrix for the {self._name} data:",
            "row is the truth, column is the system output",
            "",
            "\t" + " ".join(labels),
        ]
        for true_label in labels:
            row = [true_label] + [str(self.get(true_label, s)) for s in labels]
            lines.append("\t".join(row))
        lines.append("")
        lines.append(f"{self._name.capitalize()} accuracy = {self.accuracy:f}")
        return "\n".join(lines) + "\n"
