"""Text canonicalization applied before any pattern matching."""
import re


def to_halfwidth(s: str | None) -> str:
    """Convert full-width characters to their ASCII counterparts.

    Makes parsing robust for names like '４Ｋ', '２１６０Ｐ' or 'Ｓ０１'.
    """
    if not s:
        return ""
    out = []
    for ch in str(s):
        code = ord(ch)
        if code == 0x3000:
            out.append(" ")
        elif 0xFF01 <= code <= 0xFF5E:
            out.append(chr(code - 0xFEE0))
        else:
            out.append(ch)
    return "".join(out)


def normalize_spaces(s: str | None) -> str:
    """Collapse all whitespace (including NBSP) into single spaces."""
    if not s:
        return ""
    s = str(s).replace("\u00A0", " ")
    s = re.sub(r"\s+", " ", s)
    return s.strip()
