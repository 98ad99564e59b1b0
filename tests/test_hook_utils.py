"""Small helpers: text shaping, coercion, output sinks."""

import io

from codenv.lib.hook_utils import (
    as_int,
    as_text,
    count_files,
    preview_text,
    relative_display_path,
    truncate_text,
)
from codenv.lib.output import CollectingSink, StreamSink


def test_truncate_text() -> None:
    assert truncate_text("short", 50) == "short"
    assert truncate_text("x" * 60, 50) == "x" * 47 + "..."


def test_preview_flattens_newlines() -> None:
    assert preview_text("a\nb") == "a b"
    assert preview_text("y" * 120) == "y" * 100 + "..."


def test_relative_display_path(tmp_path) -> None:
    assert relative_display_path(f"{tmp_path}/src/a.js", tmp_path) == "src/a.js"
    assert relative_display_path("/other/a.js", tmp_path) == "/other/a.js"


def test_count_files(tmp_path) -> None:
    (tmp_path / "sub").mkdir()
    (tmp_path / "a.md").write_text("")
    (tmp_path / "sub" / "b.md").write_text("")
    (tmp_path / "c.txt").write_text("")
    assert count_files(tmp_path) == 2
    assert count_files(tmp_path / "missing") == 0


def test_coercion_follows_json_defaults() -> None:
    assert as_int("120000", 0) == 120000
    assert as_int(None, 5) == 5
    assert as_int("soon", 5) == 5
    assert as_int(True, 5) == 5
    assert as_text(None, "d") == "d"
    assert as_text("", "d") == "d"
    assert as_text(False, "d") == "d"
    assert as_text(0, "d") == "0"


def test_stream_sink_adds_newline() -> None:
    stream = io.StringIO()
    sink = StreamSink(stream)
    sink.emit("one")
    sink.emit("two\n")
    assert stream.getvalue() == "one\ntwo\n"


def test_stream_sink_survives_closed_stream() -> None:
    stream = io.StringIO()
    stream.close()
    StreamSink(stream).emit("lost")


def test_collecting_sink() -> None:
    sink = CollectingSink()
    sink.emit("a")
    sink.emit("b")
    assert sink.text == "a\nb"
