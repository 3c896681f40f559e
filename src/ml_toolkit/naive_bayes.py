"""Naive Bayes training, classification, and model persistence.

Two event models are supported:

* **multinomial** -- feature counts weight the conditional log-probabilities;
* **binarized** (Bernoulli) -- only presence/absence matters, and absent
  features contribute ``log10(1 - P(f|c))``.

All probabilities are kept in log10 space from the moment they are computed,
so scoring a document is a sum rather than a product.

Training (``N`` documents, ``|C|`` labels, vocabulary ``V``)::

    P(c)   = (class_delta + count(c)) / (class_delta * |C| + N)

    binarized:
    P(f|c) = (cond_delta + docs(c, f)) / (cond_delta * |C| + count(c))

    multinomial:
    P(f|c) = (cond_delta + occurrences(c, f))
             / (cond_delta * |V| + occurrences(c))

Binarized scoring factors the absent-feature term out of the per-document
loop::

    score(c) = log P(c) + SUM_{f in V} log(1 - P(f|c))
               + SUM_{f in doc} [log P(f|c) - log(1 - P(f|c))]

so the vocabulary-wide sum is computed once per label per ``classify`` call.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from pathlib import Path
from typing import Optional

from .config import NaiveBayesConfig
from .corpus import Corpus, Document, argmax_label
from .counters import NestedCounter, NestedDictionary
from .errors import (
    InvalidConfigurationError,
    MalformedModelFileError,
    ModelIOError,
    NullArgumentError,
    UninitializedModelError,
)
from .evaluation import ConfusionMatrix, split_name
from .parsers import load_corpus

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "//"


def _log10(value: float) -> float:
    """``log10`` that maps 0 to ``-inf`` instead of raising."""
    if value <= 0.0:
        return -math.inf
    return math.log10(value)


def _is_model_token(name: str) -> bool:
    """Labels and features must read back as one non-comment field."""
    return (
        bool(name)
        and not name.startswith(COMMENT_PREFIX)
        and not any(ch.isspace() for ch in name)
    )


def read_model_mode(path: str | Path) -> Optional[str]:
    """Event model named in a model file's ``// mode:`` header, if any.

    Returns ``"binarized"``, ``"multinomial"``, or None when the file has no
    mode comment before its first record.

    Raises:
        ModelIOError: If the file cannot be read.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                if not line.startswith(COMMENT_PREFIX):
                    return None
                mode = _mode_from_comment(line)
                if mode is not None:
                    return mode
    except OSError as exc:
        raise ModelIOError(f"Cannot read model file {path}: {exc}") from exc
    return None


def _mode_from_comment(line: str) -> Optional[str]:
    body = line[len(COMMENT_PREFIX):].strip()
    if not body.startswith("mode:"):
        return None
    fields = body[len("mode:"):].split()
    return fields[0] if fields else None


class NaiveBayesModel:
    """Naive Bayes classifier over :class:`~ml_toolkit.corpus.Corpus` data.

    Example::

        config = NaiveBayesConfig(class_delta=0.1, cond_delta=0.1,
                                  model_file=Path("nb.model.txt"))
        model = NaiveBayesModel(config)
        model.train(load_corpus("train.vectors.txt"))   # also writes the model

        test = load_corpus("test.vectors.txt")
        model.classify(test)
        print(next(iter(test)).system_label)

        # Later, without retraining:
        restored = NaiveBayesModel(config)
        restored.load_model("nb.model.txt")

    Args:
        config: Smoothing deltas, event model, and output paths.

    Raises:
        NullArgumentError: If ``config`` is None.
    """

    def __init__(self, config: NaiveBayesConfig) -> None:
        if config is None:
            raise NullArgumentError("config", "NaiveBayesModel()")
        self._config = config

        # Learned state
        self.labels_: list[str] = []
        self.vocabulary_: frozenset[str] = frozenset()
        self.class_log_prob_: Optional[dict[str, float]] = None
        self.feat_log_prob_: Optional[NestedDictionary[str, float]] = None
        self.feat_raw_prob_: Optional[NestedDictionary[str, float]] = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> NaiveBayesConfig:
        return self._config

    @property
    def binarized(self) -> bool:
        return self._config.binarized

    @property
    def is_trained(self) -> bool:
        """Whether learned state exists (from ``train`` or ``load_model``)."""
        return self.class_log_prob_ is not None and self.feat_log_prob_ is not None

    @property
    def class_log_prob(self) -> dict[str, float]:
        self._require_trained("class_log_prob")
        return self.class_log_prob_  # type: ignore[return-value]

    @property
    def feat_log_prob(self) -> NestedDictionary[str, float]:
        self._require_trained("feat_log_prob")
        return self.feat_log_prob_  # type: ignore[return-value]

    @property
    def feat_raw_prob(self) -> NestedDictionary[str, float]:
        """Non-log P(f|c); only kept in binarized mode."""
        self._require_trained("feat_raw_prob")
        if self.feat_raw_prob_ is None:
            raise UninitializedModelError(
                "feat_raw_prob is only available for binarized models"
            )
        return self.feat_raw_prob_

    def _require_trained(self, operation: str) -> None:
        if not self.is_trained:
            raise UninitializedModelError(
                f"NaiveBayesModel.{operation} used before training. "
                "Call train() or load_model() first."
            )

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def train(self, corpus: Corpus) -> "NaiveBayesModel":
        """Estimate smoothed log10 probabilities from ``corpus``.

        Every (label, feature) pair over the full training vocabulary gets a
        conditional probability, including pairs never observed together.
        The model file configured in :attr:`config` is written afterwards.

        Args:
            corpus: Labeled training documents.

        Returns:
            Self (for method chaining).

        Raises:
            NullArgumentError: If ``corpus`` is None.
            InvalidConfigurationError: If the corpus is empty, or
                ``cond_delta`` is 0 and a label has a zero denominator.
            ModelIOError: If the model file cannot be written.
        """
        if corpus is None:
            raise NullArgumentError("corpus", "NaiveBayesModel.train()")
        if len(corpus) == 0:
            raise InvalidConfigurationError("cannot train on an empty corpus")

        class_delta = self._config.class_delta
        cond_delta = self._config.cond_delta
        binarized = self._config.binarized

        # Binarized: documents containing (label, feature) and features
        # touched per label. Multinomial: summed raw counts for both.
        class_counts: Counter[str] = Counter()
        feature_counts: NestedCounter[str] = NestedCounter()
        label_totals: Counter[str] = Counter()
        vocabulary: set[str] = set()

        for doc in corpus:
            label = doc.true_label
            class_counts[label] += 1
            for feature, count in doc.features.items():
                amount = 1 if binarized else count
                feature_counts.increment(label, feature, amount)
                label_totals[label] += amount
                vocabulary.add(feature)

        labels = sorted(class_counts)
        num_labels = len(labels)
        total_docs = sum(class_counts.values())

        class_denominator = _log10(class_delta * num_labels + total_docs)
        class_log_prob = {
            label: _log10(class_delta + class_counts[label]) - class_denominator
            for label in labels
        }

        feat_log_prob: NestedDictionary[str, float] = NestedDictionary()
        feat_raw_prob: Optional[NestedDictionary[str, float]] = (
            NestedDictionary() if binarized else None
        )
        # An empty vocabulary leaves no conditionals to estimate.
        for label in labels if vocabulary else ():
            if binarized:
                denominator = cond_delta * num_labels + class_counts[label]
            else:
                denominator = cond_delta * len(vocabulary) + label_totals[label]
            if denominator <= 0:
                raise InvalidConfigurationError(
                    f"cond_delta=0 leaves label {label!r} with no probability mass; "
                    "use a positive cond_delta"
                )
            log_denominator = math.log10(denominator)

            for feature in vocabulary:
                numerator = cond_delta + feature_counts.get(label, feature)
                feat_log_prob.put(label, feature, _log10(numerator) - log_denominator)
                if feat_raw_prob is not None:
                    feat_raw_prob.put(label, feature, numerator / denominator)

        self.labels_ = labels
        self.vocabulary_ = frozenset(vocabulary)
        self.class_log_prob_ = class_log_prob
        self.feat_log_prob_ = feat_log_prob
        self.feat_raw_prob_ = feat_raw_prob

        logger.info(
            "Trained %s model on %d documents: %d labels, %d features",
            "binarized" if binarized else "multinomial",
            total_docs, num_labels, len(vocabulary),
        )

        self.write_model()
        return self

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify(self, corpus: Corpus) -> Corpus:
        """Score every document and record its system label and scores.

        Candidate labels are the labels seen at training time. Features that
        are not in the training vocabulary contribute nothing. The model is
        not modified.

        Args:
            corpus: Documents to classify (training or held-out).

        Returns:
            The same corpus, with each document's system output set.

        Raises:
            NullArgumentError: If ``corpus`` is None.
            UninitializedModelError: If the model has not been trained/loaded.
        """
        if corpus is None:
            raise NullArgumentError("corpus", "NaiveBayesModel.classify()")
        self._require_trained("classify()")

        absent_terms = self._absent_feature_terms() if self.binarized else None
        for doc in corpus:
            doc.set_system_output(self._score(doc, absent_terms))

        logger.info("Classified %d documents", len(corpus))
        return corpus

    def classify_document(self, document: Document) -> dict[str, float]:
        """Return per-label scores for one document without modifying it."""
        if document is None:
            raise NullArgumentError("document", "NaiveBayesModel.classify_document()")
        self._require_trained("classify_document()")
        absent_terms = self._absent_feature_terms() if self.binarized else None
        return self._score(document, absent_terms)

    def predict(self, document: Document) -> str:
        """Most probable label for one document (lexicographic tie-break)."""
        return argmax_label(self.classify_document(document))

    def _absent_feature_terms(self) -> dict[str, tuple[float, frozenset[str]]]:
        """Per label: SUM over V of log10(1 - P(f|c)), plus features with P = 1.

        A feature with ``P(f|c) = 1`` makes ``log10(1 - P)`` infinite. Those
        are kept out of the sum and tracked separately: a document missing
        one of them scores ``-inf`` for that label.
        """
        raw = self.feat_raw_prob_ or NestedDictionary()
        terms: dict[str, tuple[float, frozenset[str]]] = {}
        for label in self.labels_:
            total = 0.0
            certain: set[str] = set()
            for feature in self.vocabulary_:
                probability = raw.safe_get(label, feature, 0.0)
                if probability >= 1.0:
                    certain.add(feature)
                else:
                    total += math.log10(1.0 - probability)
            terms[label] = (total, frozenset(certain))
        return terms

    def _score(
        self,
        document: Document,
        absent_terms: Optional[dict[str, tuple[float, frozenset[str]]]],
    ) -> dict[str, float]:
        class_log_prob = self.class_log_prob_ or {}
        feat_log_prob = self.feat_log_prob_ or NestedDictionary()
        scores: dict[str, float] = {}

        if absent_terms is None:
            for label in self.labels_:
                score = class_log_prob[label]
                for feature, count in document.features.items():
                    # A zero count is an absent feature; 0 * -inf would be NaN.
                    if count:
                        score += count * feat_log_prob.safe_get(label, feature, 0.0)
                scores[label] = score
            return scores

        raw = self.feat_raw_prob_ or NestedDictionary()
        for label in self.labels_:
            absent_sum, certain = absent_terms[label]
            if not certain.issubset(document.features):
                scores[label] = -math.inf
                continue
            score = class_log_prob[label] + absent_sum
            for feature in document.features:
                if feature not in self.vocabulary_:
                    continue
                if feature in certain:
                    score += feat_log_prob.safe_get(label, feature, 0.0)
                    continue
                probability = raw.safe_get(label, feature, 0.0)
                score += feat_log_prob.safe_get(label, feature, 0.0) - math.log10(1.0 - probability)
            scores[label] = score
        return scores

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def write_model(self, path: Optional[str | Path] = None) -> Path:
        """Write the model as flat text.

        Layout (labels, then features within a label, sorted)::

            // comment lines
            <label> <prob> <log_prob>
            ...
            <feature> <label> <prob> <log_prob>
            ...

        Args:
            path: Destination; defaults to ``config.model_file``.

        Returns:
            The path written.

        Raises:
            UninitializedModelError: If the model has not been trained/loaded.
            ModelIOError: If the file cannot be written.
        """
        self._require_trained("write_model()")
        path = Path(path) if path is not None else self._config.model_file

        class_log_prob = self.class_log_prob
        feat_log_prob = self.feat_log_prob
        for name in sorted(set(class_log_prob) | self.vocabulary_):
            if not _is_model_token(name):
                raise ModelIOError(
                    f"Cannot write model file {path}: {name!r} is empty, contains "
                    f"whitespace, or starts with {COMMENT_PREFIX!r}"
                )
        lines = [
            f"{COMMENT_PREFIX} ml-toolkit naive bayes model",
            f"{COMMENT_PREFIX} mode: {'binarized' if self.binarized else 'multinomial'}"
            f" class_delta={self._config.class_delta!r} cond_delta={self._config.cond_delta!r}",
        ]
        for label in sorted(class_log_prob):
            log_prob = class_log_prob[label]
            lines.append(f"{label} {10 ** log_prob!r} {log_prob!r}")
        for label in sorted(feat_log_prob.outer_keys()):
            inner = feat_log_prob.inner(label)
            for feature in sorted(inner):
                log_prob = inner[feature]
                if self.feat_raw_prob_ is not None:
                    prob = self.feat_raw_prob_.safe_get(label, feature, 10 ** log_prob)
                else:
                    prob = 10 ** log_prob
                lines.append(f"{feature} {label} {prob!r} {log_prob!r}")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write("\n".join(lines) + "\n")
        except OSError as exc:
            raise ModelIOError(f"Cannot write model file {path}: {exc}") from exc

        logger.info("Wrote model to %s", path)
        return path

    def load_model(self, path: Optional[str | Path] = None) -> "NaiveBayesModel":
        """Restore learned state from a model file written by :meth:`write_model`.

        Blank lines and lines starting with ``//`` are skipped. Class records
        (3 fields) must all come before feature records (4 fields). The
        previous state is kept if loading fails.

        Args:
            path: Model file; defaults to ``config.model_file``.

        Returns:
            Self (for method chaining).

        Raises:
            MalformedModelFileError: On a bad field count, out-of-order
                records, an unknown label, or an unparsable number.
            ModelIOError: If the file cannot be read.
        """
        path = Path(path) if path is not None else self._config.model_file
        try:
            with open(path, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except OSError as exc:
            raise ModelIOError(f"Cannot read model file {path}: {exc}") from exc

        class_log_prob: dict[str, float] = {}
        feat_log_prob: NestedDictionary[str, float] = NestedDictionary()
        feat_raw_prob: NestedDictionary[str, float] = NestedDictionary()
        vocabulary: set[str] = set()
        found_features = False

        for line_number, line in enumerate(lines, start=1):
            if line.startswith(COMMENT_PREFIX):
                self._check_mode_comment(line, path)
                continue
            parts = line.split()
            if not parts:
                continue

            if len(parts) == 3:
                if found_features:
                    raise MalformedModelFileError(
                        "class record after feature records", line_number
                    )
                label, _prob, log_prob = parts
                class_log_prob[label] = self._parse_float(log_prob, line_number)
            elif len(parts) == 4:
                if not class_log_prob:
                    raise MalformedModelFileError(
                        "feature record before any class record", line_number
                    )
                found_features = True
                feature, label, prob, log_prob = parts
                if label not in class_log_prob:
                    raise MalformedModelFileError(
                        f"feature record for unknown label {label!r}", line_number
                    )
                feat_raw_prob.put(label, feature, self._parse_float(prob, line_number))
                feat_log_prob.put(label, feature, self._parse_float(log_prob, line_number))
                vocabulary.add(feature)
            else:
                raise MalformedModelFileError(
                    f"expected 3 or 4 fields, found {len(parts)}", line_number
                )

        if not class_log_prob:
            raise MalformedModelFileError(f"model file {path} contains no class records")

        self.labels_ = sorted(class_log_prob)
        self.vocabulary_ = frozenset(vocabulary)
        self.class_log_prob_ = class_log_prob
        self.feat_log_prob_ = feat_log_prob
        self.feat_raw_prob_ = feat_raw_prob if self.binarized else None

        logger.info(
            "Loaded model from %s: %d labels, %d features",
            path, len(self.labels_), len(vocabulary),
        )
        return self

    @staticmethod
    def _parse_float(raw: str, line_number: int) -> float:
        try:
            return float(raw)
        except ValueError as exc:
            raise MalformedModelFileError(f"{raw!r} is not a number", line_number) from exc

    def _check_mode_comment(self, line: str, path: Path) -> None:
        mode = _mode_from_comment(line)
        expected = "binarized" if self.binarized else "multinomial"
        if mode and mode != expected:
            logger.warning(
                "Model file %s was written by a %s model; loading it as %s",
                path, mode, expected,
            )

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def load_corpus(self, path: str | Path) -> Corpus:
        """Load a corpus file in this model's feature mode."""
        return load_corpus(path, binarized=self.binarized)

    def test(self, path: str | Path, split: str = "test") -> tuple[Corpus, ConfusionMatrix]:
        """Load, classify, and report on the corpus at ``path``.

        Returns:
            The classified corpus and its confusion matrix.
        """
        if path is None:
            raise NullArgumentError("path", "NaiveBayesModel.test()")
        corpus = self.load_corpus(path)
        self.classify(corpus)
        return corpus, self.output_results(corpus, split)

    def output_results(
        self,
        corpus: Corpus,
        split: str = "test",
        convert_log_probabilities: bool = True,
        append: bool = False,
    ) -> ConfusionMatrix:
        """Write system output for a classified corpus and build its matrix.

        Args:
            corpus: A classified corpus.
            split: ``"train"`` or ``"test"``; used in headers and the report.
            convert_log_probabilities: Print ``10 ** score`` instead of log10
                scores.
            append: Append to the system-output file instead of replacing it.

        Raises:
            ModelIOError: If the system-output file cannot be written.
        """
        if corpus is None:
            raise NullArgumentError("corpus", "NaiveBayesModel.output_results()")
        self.write_sys_output(corpus, split, convert_log_probabilities, append)
        matrix = ConfusionMatrix(corpus, split)
        logger.info("%s accuracy: %.4f", split_name(split).capitalize(), matrix.accuracy)
        return matrix

    def write_sys_output(
        self,
        corpus: Corpus,
        split: str = "test",
        convert_log_probabilities: bool = True,
        append: bool = False,
    ) -> Path:
        path = self._config.sys_output_file
        body = corpus.formatted_system_output(convert_log_probabilities)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a" if append else "w", encoding="utf-8") as f:
                f.write(f"{COMMENT_PREFIX} {split_name(split)} data:\n")
                f.write(body)
        except OSError as exc:
            raise ModelIOError(f"Cannot write system output {path}: {exc}") from exc
        logger.info("Wrote %s system output to %s", split_name(split), path)
        return path

    def to_dict(self) -> dict:
        """Learned state as plain dicts (for JSON output)."""
        self._require_trained("to_dict()")
        data = {
            "config": self._config.to_dict(),
            "labels": list(self.labels_),
            "class_log_prob": dict(self.class_log_prob),
            "feat_log_prob": self.feat_log_prob.to_dict(),
        }
        if self.feat_raw_prob_ is not None:
            data["feat_raw_prob"] = self.feat_raw_prob_.to_dict()
        return data
