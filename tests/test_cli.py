"""Tests for the command-line interface.

WHY: The CLI is the quickest way to convert a caption file, and scripts
depend on its exit codes and output naming. A silently overwritten file
or a zero exit code after a failure breaks batch jobs.

HOW: main() is called with an explicit argv against files in tmp_path.
Errors are detected through SystemExit codes; --stdout output through
capsysbinary.
"""

from __future__ import annotations

import pytest

from cea608tott.cli import _resolve_output_path, build_parser, main
from cea608tott.config import DEFAULT_FORMAT

from conftest import pop_on

VTT_DOCUMENT = (
    b"WEBVTT\r\n\r\n"
    b"00:00:01.001 --> 00:00:02.502\r\nHELLO\r\n\r\n"
    b"00:00:02.502 --> 00:00:04.004\r\nWORLD\r\n\r\n"
)


@pytest.fixture
def scc_file(tmp_path, sample_scc):
    path = tmp_path / "news.scc"
    path.write_bytes(sample_scc)
    return path


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["in.scc"])
        assert args.format == DEFAULT_FORMAT
        assert args.input_format is None
        assert args.output_dir is None
        assert args.stdout is False
        assert args.verbose is False

    def test_rejects_unknown_input_format(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["in.scc", "--input-format", "mcc"])


class TestOutputPath:
    def test_first_choice(self, tmp_path):
        assert _resolve_output_path("a", ".vtt", tmp_path) == tmp_path / "a.vtt"

    def test_numbered_on_conflict(self, tmp_path):
        (tmp_path / "a.vtt").write_bytes(b"")
        (tmp_path / "a-2.vtt").write_bytes(b"")
        assert _resolve_output_path("a", ".vtt", tmp_path) == tmp_path / "a-3.vtt"


class TestMain:
    def test_writes_next_to_input(self, scc_file):
        main([str(scc_file), "--format", "vtt"])
        assert (scc_file.parent / "news.vtt").read_bytes() == VTT_DOCUMENT

    def test_second_run_does_not_overwrite(self, scc_file):
        main([str(scc_file), "-f", "srt"])
        main([str(scc_file), "-f", "srt"])
        assert (scc_file.parent / "news.srt").exists()
        assert (scc_file.parent / "news-2.srt").exists()

    def test_output_dir(self, scc_file, tmp_path):
        out = tmp_path / "out"
        out.mkdir()
        main([str(scc_file), "-f", "raw", "--output-dir", str(out)])
        assert (out / "news.txt").read_bytes() == b"HELLO\r\nWORLD"

    def test_stdout(self, scc_file, capsysbinary):
        main([str(scc_file), "--stdout", "-f", "vtt"])
        captured = capsysbinary.readouterr()
        assert captured.out == VTT_DOCUMENT
        assert b"Converting to WebVTT" in captured.err
        assert not (scc_file.parent / "news.vtt").exists()

    def test_format_is_case_insensitive(self, scc_file):
        main([str(scc_file), "-f", "SRT"])
        assert (scc_file.parent / "news.srt").exists()

    def test_raw_input_from_suffix(self, tmp_path):
        path = tmp_path / "clip.bin"
        path.write_bytes(b"".join(bytes([p >> 8, p & 0xFF]) for p in pop_on("HI")))
        main([str(path), "-f", "raw"])
        assert (tmp_path / "clip.txt").read_bytes() == b"HI"

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / "nope.scc")])
        assert exc.value.code == 1
        assert "File not found" in capsys.readouterr().err

    def test_unknown_format(self, scc_file, capsys):
        with pytest.raises(SystemExit) as exc:
            main([str(scc_file), "-f", "ttml"])
        assert exc.value.code == 1
        assert "Unknown format 'ttml'" in capsys.readouterr().err

    def test_not_an_scc_file(self, tmp_path):
        path = tmp_path / "broken.scc"
        path.write_bytes(b"hello\n")
        with pytest.raises(SystemExit) as exc:
            main([str(path)])
        assert exc.value.code == 1

    def test_missing_output_dir(self, scc_file, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main([str(scc_file), "--output-dir", str(tmp_path / "missing")])
        assert exc.value.code == 1
