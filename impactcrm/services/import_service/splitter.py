"""Line-level CSV tokenizing for uploaded files."""

import re

BOM = "\ufeff"

_LINE_BREAK = re.compile(r"\r?\n")


def split_csv_line(line: str) -> list[str]:
    """Split one line of CSV text into fields.

    A double quote toggles quoted mode, two consecutive double quotes inside
    a quoted field produce one literal quote, and a comma outside quoted mode
    ends the current field. Malformed quoting never raises: an unterminated
    quote consumes the rest of the line.

    Args:
        line: A single line without its trailing newline.

    Returns:
        The ordered field strings (always at least one).
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1

    fields.append("".join(current))
    return fields


def decode_upload(content: bytes | str) -> str:
    """Decode uploaded bytes to text and drop a leading byte-order mark.

    Tries UTF-8 first, falls back to Latin-1 (which accepts any byte).
    """
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError:
            text = content.decode("latin-1")
    else:
        text = content
    return text.lstrip(BOM)


def iter_lines(text: str) -> list[tuple[int, str]]:
    """Split text into ``(line_number, line)`` pairs, skipping blank lines.

    Line numbers are 1-based positions in the original file so that error
    messages point at the line a user sees in a spreadsheet or editor.
    """
    return [
        (number, line)
        for number, line in enumerate(_LINE_BREAK.split(text), start=1)
        if line.strip()
    ]
