"""Upload filename sanitization.

Hey future me - client filenames go straight into storage keys and local paths, so
everything outside [A-Za-z0-9_-] in the base name becomes "_". That kills "../",
spaces, quotes and unicode in one go. The extension is kept only if it is a short
alphanumeric suffix; otherwise we fall back to .mp3 like a missing extension would.

    >>> split_upload_name("../../etc/My Song (live).MP3")
    ('My_Song__live_', '.MP3')
"""

import re

DEFAULT_AUDIO_EXTENSION = ".mp3"
FALLBACK_BASE_NAME = "track"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_\-]")
_SAFE_EXTENSION = re.compile(r"^\.[a-zA-Z0-9]{1,10}$")


def sanitize_base_name(base: str) -> str:
    """Replace every character outside the safe set with an underscore."""
    sanitized = _UNSAFE_CHARS.sub("_", base)
    return sanitized or FALLBACK_BASE_NAME


def split_upload_name(
    original_name: str | None, default_extension: str = DEFAULT_AUDIO_EXTENSION
) -> tuple[str, str]:
    """Split a client-supplied filename into (sanitized base, extension)."""
    # Browsers on Windows may send full paths - keep only the last component
    name = (original_name or "").replace("\\", "/").rsplit("/", 1)[-1]

    dot = name.rfind(".")
    if dot > 0:
        base, extension = name[:dot], name[dot:]
    else:
        base, extension = name, ""

    if not _SAFE_EXTENSION.match(extension):
        extension = default_extension
    return sanitize_base_name(base), extension
