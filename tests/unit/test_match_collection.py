"""Unit tests for windowing and raw match collection."""

from collections import Counter

import pytest

from decontam.core.errors import ConfigError, ParseError
from decontam.core.types import RawMatch, TrainingDocument
from decontam.index import load_index
from decontam.processing.stages import collect_matches, iter_windows
from decontam.processing.stages.match_collection import collect_document_matches


class TestIterWindows:
    """Tests for overlapping fixed-width windows."""

    @pytest.mark.parametrize("length,size", [(1, 1), (5, 1), (5, 3), (5, 5), (17, 4)])
    def test_window_count_is_n_minus_m_plus_one(self, length, size):
        """A line of n bytes yields n - m + 1 windows."""
        text = bytes(range(length))
        assert len(list(iter_windows(text, size))) == length - size + 1

    def test_windows_start_at_every_offset(self):
        """Window k is the slice starting at offset k."""
        assert list(iter_windows(b"abcde", 3)) == [b"abc", b"bcd", b"cde"]

    def test_short_text_yields_no_windows(self):
        """A line shorter than the window contributes nothing."""
        assert list(iter_windows(b"ab", 3)) == []

    def test_non_positive_match_size_is_rejected(self):
        """A window size below 1 is a configuration error."""
        with pytest.raises(ConfigError):
            list(iter_windows(b"abc", 0))

    def test_windows_are_bytes_of_utf8_text(self):
        """Windows are cut on bytes, not characters."""
        assert list(iter_windows("é".encode("utf-8"), 1)) == [b"\xc3", b"\xa9"]


class TestCollectDocumentMatches:
    """Tests for collecting matches from one training document."""

    def test_emits_one_match_per_occurrence(self, make_index, make_jsonl):
        """Each occurrence of each window becomes a raw match."""
        index = load_index(make_index([b"abcabc"]))
        path = make_jsonl("train/a.jsonl", ["abc"])
        matches = collect_document_matches(TrainingDocument(str(path), 0), index, 3)
        assert sorted(matches) == [RawMatch(0, 0, 0), RawMatch(0, 0, 3)]

    def test_matches_carry_document_id_and_line_number(self, make_index, make_jsonl):
        """Matches are tagged with the document's ID and the line's position."""
        index = load_index(make_index([b"xyz"]))
        path = make_jsonl("train/a.jsonl", ["nothing", "xyz"])
        matches = collect_document_matches(TrainingDocument(str(path), 7), index, 3)
        assert matches == [RawMatch(7, 1, 0)]

    def test_duplicate_windows_are_preserved(self, make_index, make_jsonl):
        """Repeated windows in one line each produce their own matches."""
        index = load_index(make_index([b"aa"]))
        path = make_jsonl("train/a.jsonl", ["aaa"])
        matches = collect_document_matches(TrainingDocument(str(path), 0), index, 2)
        assert matches == [RawMatch(0, 0, 0), RawMatch(0, 0, 0)]

    def test_blank_lines_keep_their_line_number(self, make_index, tmp_path):
        """Blank lines are skipped but still consume a line number."""
        index = load_index(make_index([b"abc"]))
        path = tmp_path / "a.jsonl"
        path.write_text('\n{"text": "abc"}\n', encoding="utf-8")
        matches = collect_document_matches(TrainingDocument(str(path), 0), index, 3)
        assert matches == [RawMatch(0, 1, 0)]

    def test_invalid_json_raises_parse_error(self, make_index, tmp_path):
        """A line that is not JSON aborts collection."""
        index = load_index(make_index([b"abc"]))
        path = tmp_path / "a.jsonl"
        path.write_text("not json\n", encoding="utf-8")
        with pytest.raises(ParseError, match="invalid JSON"):
            collect_document_matches(TrainingDocument(str(path), 0), index, 3)

    def test_missing_text_field_raises_parse_error(self, make_index, tmp_path):
        """A record without a text field aborts collection."""
        index = load_index(make_index([b"abc"]))
        path = tmp_path / "a.jsonl"
        path.write_text('{"body": "abc"}\n', encoding="utf-8")
        with pytest.raises(ParseError, match='"text"'):
            collect_document_matches(TrainingDocument(str(path), 0), index, 3)

    def test_non_object_record_raises_parse_error(self, make_index, tmp_path):
        """A JSON value that is not an object aborts collection."""
        index = load_index(make_index([b"abc"]))
        path = tmp_path / "a.jsonl"
        path.write_text('["abc"]\n', encoding="utf-8")
        with pytest.raises(ParseError, match="not a JSON object"):
            collect_document_matches(TrainingDocument(str(path), 0), index, 3)


class TestCollectMatches:
    """Tests for collecting matches over many documents."""

    def test_union_over_documents(self, make_index, make_jsonl):
        """The result is the union of every document's matches."""
        index = load_index(make_index([b"abcxyz"]))
        docs = [
            TrainingDocument(str(make_jsonl("t/a.jsonl", ["abc"])), 0),
            TrainingDocument(str(make_jsonl("t/b.jsonl", ["xyz"])), 1),
        ]
        assert sorted(collect_matches(docs, index, 3)) == [RawMatch(0, 0, 0), RawMatch(1, 0, 3)]

    def test_rejects_non_positive_match_size(self, make_index):
        """Collection refuses a window size below 1."""
        index = load_index(make_index([b"abc"]))
        with pytest.raises(ConfigError):
            collect_matches([], index, 0)

    @pytest.mark.slow
    def test_parallel_result_matches_serial_multiset(self, make_index, make_jsonl):
        """Worker count never changes the multiset of matches."""
        index = load_index(make_index([b"the cat sat on the mat", b"a cat and a hat"]))
        docs = [
            TrainingDocument(str(make_jsonl(f"t/{i}.jsonl", texts)), i)
            for i, texts in enumerate(
                [["the cat", "on the mat"], ["a hat"], ["cat cat cat"], ["nothing here"]]
            )
        ]
        serial = Counter(collect_matches(docs, index, 3, jobs=1))
        parallel = Counter(collect_matches(docs, index, 3, jobs=2))
        assert parallel == serial

    @pytest.mark.slow
    def test_parse_error_in_worker_aborts_collection(self, make_index, make_jsonl, tmp_path):
        """A failure inside a worker process propagates to the caller."""
        index = load_index(make_index([b"abc"]))
        bad = tmp_path / "t" / "bad.jsonl"
        bad.parent.mkdir(parents=True, exist_ok=True)
        bad.write_text("{broken\n", encoding="utf-8")
        docs = [
            TrainingDocument(str(make_jsonl("t/good.jsonl", ["abc"])), 0),
            TrainingDocument(str(bad), 1),
        ]
        with pytest.raises(ParseError):
            collect_matches(docs, index, 3, jobs=2)
