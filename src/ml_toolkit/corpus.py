"""Labeled documents and the corpus that owns them."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Optional

from .errors import NullArgumentError, UnclassifiedDocumentError


def ranked_labels(scores: Mapping[str, float]) -> list[str]:
    """Labels ordered by descending score; equal scores order by label."""
    return sorted(scores, key=lambda label: (-scores[label], label))


def argmax_label(scores: Mapping[str, float]) -> str:
    """Highest-scoring label. Ties go to the lexicographically smallest label."""
    if not scores:
        raise ValueError("cannot pick a label from an empty score map")
    return min(scores, key=lambda label: (-scores[label], label))


@dataclass
class Document:
    """A labeled bag of features.

    In binarized mode every present feature is stored with count 1 and the
    raw input counts are dropped at construction time.

    Attributes:
        doc_id: Sequential id assigned by the loader, unique within a corpus.
        true_label: Gold label from the input data.
        features: Mapping of feature name to non-negative count.
        binarized: Whether counts were collapsed to presence/absence.
    """

    doc_id: int
    true_label: str
    features: dict[str, int] = field(default_factory=dict)
    binarized: bool = False

    _system_label: Optional[str] = field(default=None, init=False, repr=False, compare=False)
    _label_scores: Optional[dict[str, float]] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if self.true_label is None:
            raise NullArgumentError("true_label", "Document()")
        if self.binarized:
            self.features = {feature: 1 for feature in self.features}
        else:
            self.features = dict(self.features)

    # ------------------------------------------------------------------
    # Features
    # ------------------------------------------------------------------

    @property
    def is_binarized(self) -> bool:
        return self.binarized

    @property
    def feature_set(self) -> set[str]:
        return set(self.features)

    def feature_count(self, feature: str) -> int:
        """Count of ``feature`` in this document (0 if absent)."""
        if feature is None:
            raise NullArgumentError("feature", "Document.feature_count()")
        return self.features.get(feature, 0)

    def contains(self, feature: str) -> bool:
        if feature is None:
            raise NullArgumentError("feature", "Document.contains()")
        return feature in self.features

    def __len__(self) -> int:
        return len(self.features)

    # ------------------------------------------------------------------
    # System output
    # ------------------------------------------------------------------

    @property
    def is_classified(self) -> bool:
        return self._system_label is not None

    @property
    def system_label(self) -> str:
        if self._system_label is None:
            raise UnclassifiedDocumentError(
                f"Document {self.doc_id} ({self.true_label}) has no system label; "
                "classify it first"
            )
        return self._system_label

    @property
    def label_scores(self) -> dict[str, float]:
        if self._label_scores is None:
            raise UnclassifiedDocumentError(
                f"Document {self.doc_id} ({self.true_label}) has no label scores; "
                "classify it first"
            )
        return self._label_scores

    def set_system_output(
        self,
        scores: Mapping[str, float],
        label: Optional[str] = None,
    ) -> None:
        """Record classification results.

        Args:
            scores: Score per candidate label (usually a log10 probability).
            label: Chosen label. Defaults to the argmax of ``scores``.

        Raises:
            NullArgumentError: If ``scores`` is None.
            ValueError: If ``scores`` is empty.
        """
        if scores is None:
            raise NullArgumentError("scores", "Document.set_system_output()")
        if not scores:
            raise ValueError("Document.set_system_output() received an empty score map")
        self._label_scores = dict(scores)
        self._system_label = label if label is not None else argmax_label(scores)

    def label_score(self, label: str) -> float:
        """Score assigned to ``label`` (0.0 if it was not scored)."""
        if label is None:
            raise NullArgumentError("label", "Document.label_score()")
        return self.label_scores.get(label, 0.0)

    def formatted_system_output(self, convert_log_probabilities: bool = False) -> str:
        """One system-output line: ``Document:<id> <true> <l1> <s1> ...``.

        Args:
            convert_log_probabilities: Replace each log10 score with
                ``10 ** score`` before printing.

        Raises:
            ValueError: If conversion is requested and a score is not negative.
        """
        scores = dict(self.label_scores)
        if convert_log_probabilities:
            for label, score in scores.items():
                if score >= 0:
                    raise ValueError(
                        f"Document {self.doc_id}: score {score} for {label!r} is not a "
                        "log probability; cannot convert"
                    )
                scores[label] = 10 ** score
        parts = [f"Document:{self.doc_id}", self.true_label]
        for label in ranked_labels(scores):
            parts.append(f"{label} {scores[label]}")
        return " ".join(parts)

    def to_dict(self) -> dict:
        return {"label": self.true_label, "features": dict(self.features)}

    def __lt__(self, other: "Document") -> bool:
        return self.doc_id < other.doc_id


class Corpus:
    """A collection of documents keyed by id.

    ``all_labels`` and ``all_features`` are computed on first access and
    cached; classifying documents never changes them.

    Example::

        corpus = Corpus.from_documents([
            Document(0, "spam", {"free": 2}),
            Document(1, "ham", {"meeting": 1}),
        ])
        corpus.all_labels   # frozenset({"spam", "ham"})
    """

    def __init__(self, documents: Optional[Mapping[int, Document]] = None) -> None:
        self._documents: dict[int, Document] = dict(documents or {})
        self._all_labels: Optional[frozenset[str]] = None
        self._all_features: Optional[frozenset[str]] = None

    @classmethod
    def from_documents(cls, documents: Iterable[Document]) -> "Corpus":
        if documents is None:
            raise NullArgumentError("documents", "Corpus.from_documents()")
        mapping: dict[int, Document] = {}
        for doc in documents:
            if doc.doc_id in mapping:
                raise ValueError(f"duplicate document id {doc.doc_id}")
            mapping[doc.doc_id] = doc
        return cls(mapping)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def documents(self) -> dict[int, Document]:
        return self._documents

    @property
    def ids(self) -> list[int]:
        return sorted(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        for doc_id in self.ids:
            yield self._documents[doc_id]

    def __getitem__(self, doc_id: int) -> Document:
        return self._documents[doc_id]

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def label_of(self, doc_id: int) -> str:
        return self._documents[doc_id].true_label

    def features_of(self, doc_id: int) -> set[str]:
        return self._documents[doc_id].feature_set

    @property
    def all_labels(self) -> frozenset[str]:
        if self._all_labels is None:
            self._all_labels = frozenset(d.true_label for d in self._documents.values())
        return self._all_labels

    @property
    def all_features(self) -> frozenset[str]:
        if self._all_features is None:
            features: set[str] = set()
            for doc in self._documents.values():
                features.update(doc.features)
            self._all_features = frozenset(features)
        return self._all_features

    # ------------------------------------------------------------------
    # Classification output
    # ------------------------------------------------------------------

    def set_system_output(self, doc_id: int, scores: Mapping[str, float]) -> None:
        if scores is None:
            raise NullArgumentError("scores", "Corpus.set_system_output()")
        self._documents[doc_id].set_system_output(scores)

    def formatted_system_output(self, convert_log_probabilities: bool = False) -> str:
        """System-output lines for every document, in id order."""
        return "".join(
            doc.formatted_system_output(convert_log_probabilities) + "\n" for doc in self
        )

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize as ``{"<id>": {"label": ..., "features": {...}}}``."""
        payload = {str(doc.doc_id): doc.to_dict() for doc in self}
        return json.dumps(payload, indent=indent)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Corpus):
            return NotImplemented
        return self._documents == other._documents

    def __repr__(self) -> str:
        return (
            f"Corpus(documents={len(self)}, labels={len(self.all_labels)}, "
            f"features={len(self.all_features)})"
        )
