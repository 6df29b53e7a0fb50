import re
import unicodedata

# Zero-width characters pasted from rich-text editors
_INVISIBLE = dict.fromkeys(map(ord, "\u200b\u200c\u200d\u2060\ufeff"))

_HORIZONTAL_SPACE = re.compile(r"[ \t\u00a0\u2007\u202f]+")
_SPACE_AROUND_NEWLINE = re.compile(r" ?\n ?")
_BLANK_LINE_RUN = re.compile(r"\n{3,}")


def normalize_text(text: str) -> str:
    """Reduce text to the form used for cache fingerprints.

    Applies NFC composition, drops zero-width characters, converts CRLF/CR to
    LF, collapses horizontal whitespace (including no-break spaces), keeps at
    most one empty line between paragraphs and trims both ends. Two submissions
    that only differ in those respects share a cache key.

    Args:
        text: Raw submitted text.

    Returns:
        str: Normalized text.
    """
    text = unicodedata.normalize("NFC", text).translate(_INVISIBLE)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE.sub("\n", text)
    text = _BLANK_LINE_RUN.sub("\n\n", text)
    return text.strip()
