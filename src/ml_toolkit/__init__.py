"""ml-toolkit -- Naive Bayes training and classification for labeled feature vectors."""

__version__ = "0.1.0"

from .config import NaiveBayesConfig
from .corpus import Corpus, Document, argmax_label, ranked_labels
from .counters import NestedCounter, NestedDictionary
from .errors import (
    CorpusFormatError,
    CorpusIOError,
    InvalidConfigurationError,
    IOFailureError,
    MalformedModelFileError,
    MLToolkitError,
    ModelIOError,
    NullArgumentError,
    UnclassifiedDocumentError,
    UninitializedModelError,
)
from .evaluation import ConfusionMatrix
from .naive_bayes import NaiveBayesModel, read_model_mode
from .parsers import JSONParser, VectorParser, get_parser, load_corpus, parse_vector_line

__all__ = [
    # Core
    "NaiveBayesModel",
    "NaiveBayesConfig",
    "read_model_mode",
    # Data
    "Corpus",
    "Document",
    "argmax_label",
    "ranked_labels",
    "NestedCounter",
    "NestedDictionary",
    # Loading
    "VectorParser",
    "JSONParser",
    "get_parser",
    "load_corpus",
    "parse_vector_line",
    # Evaluation
    "ConfusionMatrix",
    # Errors
    "MLToolkitError",
    "NullArgumentError",
    "InvalidConfigurationError",
    "UninitializedModelError",
    "MalformedModelFileError",
    "CorpusFormatError",
    "UnclassifiedDocumentError",
    "IOFailureError",
    "CorpusIOError",
    "ModelIOError",
]
