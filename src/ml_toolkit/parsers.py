"""Corpus loaders for the training-vector text format and JSON interchange.

Training-vector files hold one document per line::

    <label> <feature1>:<count1> <feature2>:<count2> ...

JSON files map document ids to ``{"label": ..., "features": {...}}``.
Document ids are handed out by the loader from an explicit cursor, starting
at 0 for every file.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from .corpus import Corpus, Document
from .errors import CorpusFormatError, CorpusIOError, NullArgumentError

logger = logging.getLogger(__name__)


def parse_vector_line(
    line: str,
    doc_id: int,
    binarized: bool = False,
    line_number: int | None = None,
) -> Document:
    """Parse one training-vector line into a :class:`Document`.

    The feature name is everything before the last ``:`` of a token, so
    feature names may themselves contain colons. In binarized mode the count
    is not read at all.

    Args:
        line: The raw line (label followed by ``feature:count`` tokens).
        doc_id: Id to give the document.
        binarized: Collapse counts to presence/absence.
        line_number: 1-based line number used in error messages.

    Raises:
        CorpusFormatError: On an empty line, a token without ``:``, a
            duplicate feature, or a count that is not a non-negative integer.
    """
    if line is None:
        raise NullArgumentError("line", "parse_vector_line()")
    parts = line.split()
    if not parts:
        raise CorpusFormatError("empty training vector", line_number)

    label, tokens = parts[0], parts[1:]
    features: dict[str, int] = {}
    for token in tokens:
        feature, sep, raw_count = token.rpartition(":")
        if not sep or not feature:
            raise CorpusFormatError(
                f"value {token!r} is not formatted as feature:count", line_number
            )
        if feature in features:
            raise CorpusFormatError(
                f"feature {feature!r} appears more than once in the vector", line_number
            )
        if binarized:
            features[feature] = 1
            continue
        try:
            count = int(raw_count)
        except ValueError as exc:
            raise CorpusFormatError(
                f"count in {token!r} is not an integer", line_number
            ) from exc
        if count < 0:
            raise CorpusFormatError(f"count in {token!r} is negative", line_number)
        features[feature] = count

    return Document(doc_id=doc_id, true_label=label, features=features, binarized=binarized)


def _is_token(value: str) -> bool:
    """Whether ``value`` survives a whitespace-split text format as one field."""
    return bool(value) and not any(ch.isspace() for ch in value)


def parse_json_document(key: str, payload: Any, binarized: bool = False) -> Document:
    """Build a :class:`Document` from one entry of a JSON corpus."""
    if not isinstance(payload, dict):
        raise CorpusFormatError(f"document {key!r} is not a JSON object")
    if "label" not in payload:
        raise CorpusFormatError(f"document {key!r} requires a \"label\" entry")
    if "features" not in payload:
        raise CorpusFormatError(f"document {key!r} requires a \"features\" entry")
    try:
        doc_id = int(key)
    except ValueError as exc:
        raise CorpusFormatError(f"document id {key!r} is not an integer") from exc

    label = str(payload["label"])
    if not _is_token(label):
        raise CorpusFormatError(
            f"label {label!r} of document {key!r} must be non-empty and contain no whitespace"
        )

    raw_features = payload["features"] or {}
    if not isinstance(raw_features, dict):
        raise CorpusFormatError(f"features of document {key!r} must be an object")

    features: dict[str, int] = {}
    for feature, value in raw_features.items():
        if not _is_token(feature):
            raise CorpusFormatError(
                f"feature {feature!r} in document {key!r} must be non-empty and contain no whitespace"
            )
        if value is None:
            features[feature] = 1
            continue
        try:
            count = int(value)
        except (TypeError, ValueError) as exc:
            raise CorpusFormatError(
                f"count {value!r} for feature {feature!r} in document {key!r} is not an integer"
            ) from exc
        if count < 0:
            raise CorpusFormatError(
                f"count for feature {feature!r} in document {key!r} is negative"
            )
        features[feature] = count

    return Document(
        doc_id=doc_id,
        true_label=label,
        features=features,
        binarized=binarized,
    )


class CorpusParser(ABC):
    """Abstract base class for corpus loaders.

    Subclasses implement :meth:`parse_text`; :meth:`parse` handles path
    validation and turns read failures into :class:`CorpusIOError`.
    """

    supported_extensions: tuple[str, ...] = ()

    def __init__(self, binarized: bool = False) -> None:
        self.binarized = binarized

    def can_handle(self, path: Path) -> bool:
        """Check if this parser can handle the given file."""
        return path.suffix.lower() in self.supported_extensions

    def parse(self, path: str | Path) -> Corpus:
        """Read and parse a corpus file.

        Raises:
            CorpusIOError: If the file is missing or cannot be read.
            CorpusFormatError: If the content is malformed.
        """
        if path is None:
            raise NullArgumentError("path", f"{self.__class__.__name__}.parse()")
        path = Path(path)
        if not path.is_file():
            raise CorpusIOError(f"Corpus file not found: {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CorpusIOError(f"Cannot read corpus file {path}: {exc}") from exc

        corpus = self.parse_text(text)
        logger.info(
            "Loaded %d documents (%d labels, %d features) from %s",
            len(corpus), len(corpus.all_labels), len(corpus.all_features), path,
        )
        return corpus

    @abstractmethod
    def parse_text(self, text: str) -> Corpus:
        """Parse corpus content that has already been read into memory."""
        ...


class VectorParser(CorpusParser):
    """Parser for training-vector text files (one document per line).

    Blank lines are skipped and do not consume a document id.
    """

    supported_extensions = (".txt", ".vectors", ".vec")

    def parse_text(self, text: str) -> Corpus:
        documents: dict[int, Document] = {}
        next_id = 0
        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            doc = parse_vector_line(line, next_id, self.binarized, line_number)
            documents[doc.doc_id] = doc
            next_id += 1
            logger.debug("line %d -> document %d (%s)", line_number, doc.doc_id, doc.true_label)
        return Corpus(documents)


class JSONParser(CorpusParser):
    """Parser for JSON corpora; document ids come from the object keys."""

    supported_extensions = (".json",)

    def parse_text(self, text: str) -> Corpus:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CorpusFormatError(f"invalid JSON corpus: {exc}", exc.lineno) from exc
        if not isinstance(data, dict):
            raise CorpusFormatError("JSON corpus must be an object keyed by document id")

        documents = [parse_json_document(key, value, self.binarized) for key, value in data.items()]
        return Corpus.from_documents(documents)


def get_parser(path: str | Path, binarized: bool = False) -> CorpusParser:
    """Pick a parser by file extension.

    JSON files get :class:`JSONParser`; anything else is read as training
    vectors, since vector files are commonly extensionless.
    """
    json_parser = JSONParser(binarized)
    if json_parser.can_handle(Path(path)):
        return json_parser
    return VectorParser(binarized)


def load_corpus(path: str | Path, binarized: bool = False) -> Corpus:
    """Load a corpus file with the parser matching its extension."""
    if path is None:
        raise NullArgumentError("path", "load_corpus()")
    return get_parser(path, binarized).parse(path)
