"""Shared test fixtures for ml-toolkit tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from ml_toolkit.config import NaiveBayesConfig
from ml_toolkit.corpus import Corpus
from ml_toolkit.parsers import VectorParser

# Three 10-document newsgroup classes over a 7-word vocabulary
# (waste, com, how, your, cheaper, israel, gun). Every count is 1, so the
# binarized and multinomial statistics line up document for document.
POLITICS_VECTORS = "\n".join(
    [
        "talk.politics.misc com:1 your:1 cheaper:1",
        "talk.politics.misc com:1 your:1",
    ]
    + ["talk.politics.misc com:1"] * 4
    + ["talk.politics.misc how:1"] * 4
    + ["talk.politics.mideast israel:1"] * 5
    + [
        "talk.politics.mideast waste:1",
        "talk.politics.mideast how:1",
    ]
    + ["talk.politics.mideast"] * 3
    + ["talk.politics.guns gun:1"] * 8
    + [
        "talk.politics.guns com:1",
        "talk.politics.guns your:1",
    ]
) + "\n"


@pytest.fixture
def politics_path(tmp_path: Path) -> Path:
    """Training-vector file holding the politics corpus."""
    path = tmp_path / "politics.vectors.txt"
    path.write_text(POLITICS_VECTORS, encoding="utf-8")
    return path


@pytest.fixture
def politics_corpus() -> Corpus:
    return VectorParser(binarized=False).parse_text(POLITICS_VECTORS)


@pytest.fixture
def binary_politics_corpus() -> Corpus:
    return VectorParser(binarized=True).parse_text(POLITICS_VECTORS)


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory for configs that write into the test's tmp directory."""

    def _make(**kwargs) -> NaiveBayesConfig:
        kwargs.setdefault("model_file", tmp_path / "nb.model.txt")
        kwargs.setdefault("sys_output_file", tmp_path / "nb.sys_output.txt")
        return NaiveBayesConfig(**kwargs)

    return _make
