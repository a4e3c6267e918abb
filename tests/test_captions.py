from __future__ import annotations

from core.captions import vtt_to_text


def test_vtt_to_text_drops_header_timings_and_blank_lines() -> None:
    raw = (
        "WEBVTT\n"
        "\n"
        "00:00:00.000 --> 00:00:02.500\n"
        "Hello and welcome\n"
        "to the course.\n"
        "\n"
        "00:00:02.500 --> 00:00:05.000\n"
        "   Let's   begin.  \n"
    )
    assert vtt_to_text(raw) == "Hello and welcome to the course. Let's begin."


def test_vtt_to_text_strips_inline_cue_tags() -> None:
    raw = "WEBVTT\n\n00:01.000 --> 00:02.000\n<v Instructor>Variables <i>hold</i> values</v>\n"
    assert vtt_to_text(raw) == "Variables hold values"


def test_vtt_to_text_handles_crlf_and_short_timestamps() -> None:
    raw = "WEBVTT\r\n\r\n01:02.000 --> 01:03.000\r\nfirst\r\n\r\n01:03.000 --> 01:04.000\r\nsecond\r\n"
    assert vtt_to_text(raw) == "first second"


def test_vtt_to_text_empty_document() -> None:
    assert vtt_to_text("") == ""
    assert vtt_to_text("WEBVTT\n\n") == ""
