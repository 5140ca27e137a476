"""Tests for upload filename sanitization."""

import pytest

from tunecrate.domain.value_objects import sanitize_base_name, split_upload_name


@pytest.mark.parametrize(
    ("original", "expected"),
    [
        ("song.mp3", ("song", ".mp3")),
        ("My Song (live).flac", ("My_Song__live_", ".flac")),
        ("../../etc/passwd", ("passwd", ".mp3")),
        ("C:\\Users\\me\\track-01.wav", ("track-01", ".wav")),
        ("noextension", ("noextension", ".mp3")),
        (".hidden", ("_hidden", ".mp3")),
        ("weird.ext with space", ("weird", ".mp3")),
        ("Ünïcödé.ogg", ("_n_c_d_", ".ogg")),
        ("", ("track", ".mp3")),
        (None, ("track", ".mp3")),
    ],
)
def test_split_upload_name(original: str | None, expected: tuple[str, str]) -> None:
    assert split_upload_name(original) == expected


def test_default_extension_is_configurable() -> None:
    assert split_upload_name("voice", default_extension=".m4a") == ("voice", ".m4a")


def test_sanitized_names_only_use_safe_characters() -> None:
    assert sanitize_base_name("a/b\\c d;e'f\"g$h") == "a_b_c_d_e_f_g_h"
