"""Tests for corpus parsers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ml_toolkit.errors import CorpusFormatError, CorpusIOError, NullArgumentError
from ml_toolkit.parsers import (
    JSONParser,
    VectorParser,
    get_parser,
    load_corpus,
    parse_json_document,
    parse_vector_line,
)

# ---------------------------------------------------------------------------
# Training-vector lines
# ---------------------------------------------------------------------------


class TestParseVectorLine:
    """Tests for parse_vector_line."""

    def test_basic_line(self):
        doc = parse_vector_line("spam free:2 win:1", 4)
        assert doc.doc_id == 4
        assert doc.true_label == "spam"
        assert doc.features == {"free": 2, "win": 1}

    def test_label_only(self):
        doc = parse_vector_line("ham", 0)
        assert doc.features == {}

    def test_binarized_ignores_counts(self):
        doc = parse_vector_line("spam free:7 win:junk", 0, binarized=True)
        assert doc.features == {"free": 1, "win": 1}

    def test_feature_may_contain_colon(self):
        doc = parse_vector_line("url http://x:3", 0)
        assert doc.features == {"http://x": 3}

    def test_extra_whitespace(self):
        doc = parse_vector_line("  spam   free:2\twin:1  ", 0)
        assert doc.features == {"free": 2, "win": 1}

    @pytest.mark.parametrize(
        "line, message",
        [
            ("", "empty training vector"),
            ("   ", "empty training vector"),
            ("spam free", "feature:count"),
            ("spam :3", "feature:count"),
            ("spam free:1 free:2", "more than once"),
            ("spam free:x", "not an integer"),
            ("spam free:1.5", "not an integer"),
            ("spam free:-1", "negative"),
        ],
    )
    def test_malformed_lines(self, line, message):
        with pytest.raises(CorpusFormatError, match=message):
            parse_vector_line(line, 0, line_number=12)

    def test_error_carries_line_number(self):
        with pytest.raises(CorpusFormatError) as info:
            parse_vector_line("spam free", 0, line_number=12)
        assert info.value.line_number == 12
        assert "(line 12)" in str(info.value)

    def test_none_line_raises(self):
        with pytest.raises(NullArgumentError):
            parse_vector_line(None, 0)


# ---------------------------------------------------------------------------
# VectorParser
# ---------------------------------------------------------------------------


class TestVectorParser:
    """Tests for VectorParser."""

    def test_ids_are_sequential_from_zero(self):
        corpus = VectorParser().parse_text("a x:1\nb y:2\nc z:3\n")
        assert corpus.ids == [0, 1, 2]
        assert [d.true_label for d in corpus] == ["a", "b", "c"]

    def test_blank_lines_do_not_consume_ids(self):
        corpus = VectorParser().parse_text("a x:1\n\n   \nb y:2\n")
        assert corpus.ids == [0, 1]
        assert corpus[1].true_label == "b"

    def test_each_parse_restarts_ids(self):
        parser = VectorParser()
        parser.parse_text("a x:1\nb y:1\n")
        assert parser.parse_text("c z:1\n").ids == [0]

    def test_line_number_in_error(self):
        with pytest.raises(CorpusFormatError, match=r"\(line 3\)"):
            VectorParser().parse_text("a x:1\n\nb broken\n")

    def test_parse_file(self, politics_path: Path):
        corpus = VectorParser().parse(politics_path)
        assert len(corpus) == 30
        assert len(corpus.all_labels) == 3
        assert len(corpus.all_features) == 7

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(CorpusIOError, match="not found"):
            VectorParser().parse(tmp_path / "missing.txt")

    def test_directory_is_not_a_file(self, tmp_path: Path):
        with pytest.raises(CorpusIOError):
            VectorParser().parse(tmp_path)

    def test_can_handle(self):
        parser = VectorParser()
        assert parser.can_handle(Path("train.vectors.txt"))
        assert parser.can_handle(Path("train.VEC"))
        assert not parser.can_handle(Path("train.json"))


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


class TestJSONParser:
    """Tests for JSONParser and parse_json_document."""

    def test_parse_text(self):
        text = json.dumps({
            "5": {"label": "spam", "features": {"free": 2}},
            "2": {"label": "ham", "features": {"meeting": "3", "agenda": None}},
        })
        corpus = JSONParser().parse_text(text)
        assert corpus.ids == [2, 5]
        assert corpus[2].features == {"meeting": 3, "agenda": 1}

    def test_binarized(self):
        corpus = JSONParser(binarized=True).parse_text(
            '{"0": {"label": "spam", "features": {"free": 9}}}'
        )
        assert corpus[0].features == {"free": 1}

    def test_roundtrip_through_corpus_json(self):
        corpus = VectorParser().parse_text("a x:2 y:1\nb z:4\n")
        assert JSONParser().parse_text(corpus.to_json()) == corpus

    @pytest.mark.parametrize(
        "key, payload, message",
        [
            ("0", {"features": {}}, "label"),
            ("0", {"label": "a"}, "features"),
            ("zero", {"label": "a", "features": {}}, "not an integer"),
            ("0", {"label": "a", "features": {"x": "many"}}, "not an integer"),
            ("0", {"label": "a", "features": {"x": -2}}, "negative"),
            ("0", ["a"], "not a JSON object"),
            ("0", {"label": "a", "features": ["x"]}, "must be an object"),
            ("0", {"label": "talk politics", "features": {}}, "no whitespace"),
            ("0", {"label": "", "features": {}}, "non-empty"),
            ("0", {"label": "a", "features": {"new york": 1}}, "no whitespace"),
            ("0", {"label": "a", "features": {"": 1}}, "non-empty"),
            ("0", {"label": "a", "features": {"tab\there": 1}}, "no whitespace"),
        ],
    )
    def test_malformed_documents(self, key, payload, message):
        with pytest.raises(CorpusFormatError, match=message):
            parse_json_document(key, payload)

    def test_invalid_json(self):
        with pytest.raises(CorpusFormatError, match="invalid JSON"):
            JSONParser().parse_text("{not json")

    def test_top_level_must_be_object(self):
        with pytest.raises(CorpusFormatError, match="keyed by document id"):
            JSONParser().parse_text("[]")


# ---------------------------------------------------------------------------
# Parser selection
# ---------------------------------------------------------------------------


class TestGetParser:
    """Tests for get_parser / load_corpus."""

    def test_json_extension(self):
        assert isinstance(get_parser("corpus.json"), JSONParser)

    def test_other_extensions_use_vectors(self):
        assert isinstance(get_parser("train.vectors.txt"), VectorParser)
        assert isinstance(get_parser("train"), VectorParser)

    def test_binarized_flag_is_passed_through(self):
        assert get_parser("corpus.json", binarized=True).binarized

    def test_load_corpus_json(self, tmp_path: Path):
        path = tmp_path / "corpus.json"
        path.write_text('{"0": {"label": "a", "features": {"x": 1}}}', encoding="utf-8")
        corpus = load_corpus(path)
        assert corpus[0].true_label == "a"

    def test_load_corpus_none(self):
        with pytest.raises(NullArgumentError):
            load_corpus(None)
