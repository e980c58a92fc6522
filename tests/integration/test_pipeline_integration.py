"""Integration tests for the two-phase decontamination pipeline."""

import pytest

from decontam.__main__ import main
from decontam.core import BuildMatchesConfig, MarkContaminatesConfig
from decontam.core.types import ContaminationRecord, RawMatch
from decontam.data import read_contaminates, read_matches, read_path_index
from decontam.processing import run_build_matches, run_mark_contaminates


def _build(tmp_path, index, trainset, jobs=1, match_size=3, reports=None):
    config = BuildMatchesConfig(
        data_file=str(index),
        trainset=[str(p) for p in trainset],
        output=str(tmp_path / "work"),
        match_size=match_size,
        jobs=jobs,
        reports=reports,
    )
    return run_build_matches(config)


def _mark(tmp_path, index, threshold, jobs=1, match_size=3, reports=None):
    config = MarkContaminatesConfig(
        data_file=str(index),
        match_location=str(tmp_path / "work" / "matches.bin.gz"),
        output=str(tmp_path / "work"),
        threshold=threshold,
        match_size=match_size,
        jobs=jobs,
        reports=reports,
    )
    return run_mark_contaminates(config)


class TestPipelineIntegration:
    """Integration tests verifying the complete pipeline behavior."""

    def test_build_matches_writes_path_index_and_matches(self, tmp_path, make_index, make_jsonl):
        """A training line found twice in the corpus yields two raw matches."""
        index = make_index([b"abcabc"])
        train = make_jsonl("train/a.jsonl", ["abc"])

        summary = _build(tmp_path, index, [train])

        assert (summary.files, summary.matches) == (1, 2)
        assert read_path_index(tmp_path / "work" / "paths.json.gz") == {str(train): 0}
        matches = read_matches(tmp_path / "work" / "matches.bin.gz")
        assert sorted(matches) == [RawMatch(0, 0, 0), RawMatch(0, 0, 3)]

    @pytest.mark.parametrize("threshold", [0.5, 1.0])
    def test_full_coverage_marks_document(self, tmp_path, make_index, make_jsonl, threshold):
        """Two occurrences of one window cover the whole document."""
        index = make_index([b"abcabc"])
        _build(tmp_path, index, [make_jsonl("train/a.jsonl", ["abc"])])

        summary = _mark(tmp_path, index, threshold)

        assert read_contaminates(tmp_path / "work" / "contaminates.bin.gz") == [
            ContaminationRecord(0, 0, 0)
        ]
        assert (summary.contaminated_documents, summary.total_records) == (1, 1)

    def test_partial_coverage_below_threshold_marks_nothing(
        self, tmp_path, make_index, make_jsonl
    ):
        """Three of six covered bytes fall short of a 0.6 threshold."""
        index = make_index([b"abcxyz"])
        _build(tmp_path, index, [make_jsonl("train/a.jsonl", ["abc"])])

        summary = _mark(tmp_path, index, 0.6)

        assert read_contaminates(tmp_path / "work" / "contaminates.bin.gz") == []
        assert summary.total_records == 0

    def test_records_name_validation_document_and_training_line(
        self, tmp_path, make_index, make_jsonl
    ):
        """Only the document the line covers is marked, with the right line number."""
        index = make_index([b"hello world", b"quick fox!"])
        make_jsonl("train/a.jsonl", ["unrelated text"])
        make_jsonl("train/b.jsonl", ["", "the quick fox!"])

        _build(tmp_path, index, [tmp_path / "train"], match_size=4)
        _mark(tmp_path, index, 0.9, match_size=4)

        # b.jsonl sorts after a.jsonl; the empty record still uses line number 0
        assert read_contaminates(tmp_path / "work" / "contaminates.bin.gz") == [
            ContaminationRecord(1, 1, 1)
        ]

    @pytest.mark.slow
    def test_parallel_run_matches_serial_run(self, tmp_path, make_index, make_jsonl):
        """Worker count never changes the contamination records."""
        docs = [b"the cat sat on the mat", b"a dog in the fog", b"mat cat hat"]
        index = make_index(docs)
        train = [
            make_jsonl(f"train/{i}.jsonl", ["the cat sat", "dog in the fog", "hat"])
            for i in range(4)
        ]

        _build(tmp_path, index, train, jobs=1)
        _mark(tmp_path, index, 0.3, jobs=1)
        serial = read_contaminates(tmp_path / "work" / "contaminates.bin.gz")

        _build(tmp_path, index, train, jobs=2)
        _mark(tmp_path, index, 0.3, jobs=2)
        parallel = read_contaminates(tmp_path / "work" / "contaminates.bin.gz")

        assert parallel == serial
        assert serial

    def test_pipeline_with_reports(self, tmp_path, make_index, make_jsonl):
        """Both phases write a summary and a log when reports are enabled."""
        index = make_index([b"abcabc"])
        reports = tmp_path / "reports"
        _build(tmp_path, index, [make_jsonl("a.jsonl", ["abc"])], reports=str(reports))
        _mark(tmp_path, index, 0.5, reports=str(reports))

        report_dirs = sorted(p.name for p in reports.iterdir())
        assert [name.endswith("_build-matches") for name in report_dirs].count(True) == 1
        assert [name.endswith("_mark-contaminates") for name in report_dirs].count(True) == 1
        for report_dir in reports.iterdir():
            assert (report_dir / "summary.txt").exists()
            assert list(report_dir.glob("decontam-*.log"))


class TestCommandLine:
    """Tests for the command-line entry point's exit status."""

    def test_successful_run_exits_zero(self, tmp_path, make_index, make_jsonl):
        """Both subcommands succeed on valid input."""
        index = make_index([b"abcabc"])
        train = make_jsonl("train/a.jsonl", ["abc"])
        work = tmp_path / "work"

        assert main(
            ["build-matches", "--data-file", str(index), "--trainset", str(train),
             "-o", str(work), "--match-size", "3", "-j", "1"]
        ) == 0
        assert main(
            ["mark-contaminates", "--data-file", str(index), "--match-location",
             str(work / "matches.bin.gz"), "-o", str(work), "--threshold", "1.0",
             "--match-size", "3", "-j", "1"]
        ) == 0
        assert read_contaminates(work / "contaminates.bin.gz") == [ContaminationRecord(0, 0, 0)]

    def test_malformed_training_line_exits_nonzero(self, tmp_path, make_index):
        """A training line that is not JSON aborts the run."""
        index = make_index([b"abcabc"])
        train = tmp_path / "train.jsonl"
        train.write_text('{"text": "abc"}\nnot json\n', encoding="utf-8")

        status = main(
            ["build-matches", "--data-file", str(index), "--trainset", str(train),
             "-o", str(tmp_path / "work"), "--match-size", "3", "-j", "1"]
        )

        assert status == 1
        assert not (tmp_path / "work" / "matches.bin.gz").exists()

    def test_invalid_threshold_exits_nonzero(self, tmp_path, make_index):
        """A threshold above 1 is rejected before any work is done."""
        index = make_index([b"abcabc"])
        status = main(
            ["mark-contaminates", "--data-file", str(index), "--match-location", "m.bin.gz",
             "-o", str(tmp_path), "--threshold", "1.5", "--match-size", "3"]
        )
        assert status == 1

    def test_missing_match_file_exits_nonzero(self, tmp_path, make_index):
        """Marking without a match file fails cleanly."""
        index = make_index([b"abcabc"])
        status = main(
            ["mark-contaminates", "--data-file", str(index), "--match-location",
             str(tmp_path / "missing.bin.gz"), "-o", str(tmp_path), "--threshold", "0.5",
             "--match-size", "3", "-j", "1"]
        )
        assert status == 1
