"""Tests for the CSV report writer."""

from datetime import datetime, timezone

from phrase_scan.models.hit import WordHit
from phrase_scan.report import (
    CSV_HEADER,
    format_csv_row,
    render_csv,
    report_file_name,
    sort_hits,
    write_csv_report,
)


def _hit(source="a.wav", start=0.0, end=1.0, phrase="hello world", context="hello world"):
    return WordHit(source=source, phrase=phrase, start=start, end=end, context=context)


class TestFormatCsvRow:
    """Tests for format_csv_row."""

    def test_format(self):
        """Test the row layout."""
        row = format_csv_row(_hit(source="dir/a.wav", start=1.5, end=2.25))

        assert row == '"dir/a.wav",1.500,2.250,"hello world","hello world"'

    def test_embedded_quotes_are_doubled(self):
        """Test that quotes inside fields are doubled."""
        row = format_csv_row(_hit(source='say "hi".wav', context='he said "hello world"'))

        assert row == '"say ""hi"".wav",0.000,1.000,"hello world","he said ""hello world"""'

    def test_commas_stay_inside_quotes(self):
        """Test that commas in the context do not split the field."""
        row = format_csv_row(_hit(context="well, hello world, again"))

        assert row.endswith(',"well, hello world, again"')


class TestSortHits:
    """Tests for sort_hits."""

    def test_sort_by_source_then_start(self):
        """Test deterministic ordering."""
        hits = [
            _hit(source="b.wav", start=1.0),
            _hit(source="a.wav", start=5.0),
            _hit(source="a.wav", start=2.0),
        ]

        ordered = sort_hits(hits)

        assert [(h.source, h.start) for h in ordered] == [
            ("a.wav", 2.0),
            ("a.wav", 5.0),
            ("b.wav", 1.0),
        ]


class TestRender:
    """Tests for render_csv and report_file_name."""

    def test_empty_report_has_header(self):
        """Test that a report without hits still has the header."""
        assert render_csv([]) == CSV_HEADER + "\n"

    def test_render(self):
        """Test rendering rows in the given order."""
        text = render_csv([_hit(source="b.wav"), _hit(source="a.wav")])

        lines = text.splitlines()
        assert lines[0] == "file,start,end,word,context"
        assert lines[1].startswith('"b.wav"')
        assert lines[2].startswith('"a.wav"')

    def test_report_file_name(self):
        """Test the run file naming."""
        now = datetime(2024, 3, 5, 14, 30, 15, 123456, tzinfo=timezone.utc)

        assert report_file_name(now) == "run-20240305T143015123456Z.csv"


class TestWriteCsvReport:
    """Tests for write_csv_report."""

    def test_writes_sorted_report_with_bom(self, tmp_path):
        """Test the written file."""
        output_dir = tmp_path / "reports"

        path = write_csv_report(
            [_hit(source="b.wav"), _hit(source="a.wav", start=3.0, end=4.0)],
            output_dir,
        )

        assert path.parent == output_dir
        assert path.name.startswith("run-")
        assert path.suffix == ".csv"

        raw = path.read_bytes()
        assert raw.startswith(b"\xef\xbb\xbf")

        lines = raw.decode("utf-8-sig").splitlines()
        assert lines == [
            CSV_HEADER,
            '"a.wav",3.000,4.000,"hello world","hello world"',
            '"b.wav",0.000,1.000,"hello world","hello world"',
        ]

    def test_no_temp_files_left(self, tmp_path):
        """Test that only the report remains in the output directory."""
        path = write_csv_report([], tmp_path)

        assert list(tmp_path.iterdir()) == [path]
