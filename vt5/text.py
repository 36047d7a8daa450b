from __future__ import annotations

import re
import unicodedata


_NON_WORD = re.compile(r"[^\w]+|_+", re.UNICODE)
_SPACES = re.compile(r"\s+")


def normalize_lower_no_diacritics(text: str) -> str:
    """Lowercase, strip combining marks, replace non letters/digits by single spaces."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    cleaned = _NON_WORD.sub(" ", stripped).strip()
    return _SPACES.sub(" ", cleaned)


def normalize_canonical(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn").strip()


# Koelner Phonetik ---------------------------------------------------------
_VOWELS = set("AEIJOUY")


def _cologne_code(prev: str, ch: str, nxt: str, first: bool) -> str:
    if ch in _VOWELS:
        return "0"
    if ch == "H":
        return ""
    if ch == "B":
        return "1"
    if ch == "P":
        return "3" if nxt == "H" else "1"
    if ch in "DT":
        return "8" if nxt in ("C", "S", "Z") else "2"
    if ch in "FVW":
        return "3"
    if ch in "GKQ":
        return "4"
    if ch == "C":
        if first:
            return "4" if nxt in "AHKLOQRUX" and nxt else "8"
        if prev in ("S", "Z"):
            return "8"
        return "4" if nxt and nxt in "AHKOQUX" else "8"
    if ch == "X":
        return "8" if prev in ("C", "K", "Q") else "48"
    if ch == "L":
        return "5"
    if ch in "MN":
        return "6"
    if ch == "R":
        return "7"
    if ch in "SZ":
        return "8"
    return ""


def cologne_phonetic(text: str) -> str:
    """Encode ``text`` with the Koelner Phonetik; words are encoded and joined by spaces."""
    words = normalize_lower_no_diacritics(text.replace("ß", "ss")).upper().split()
    encoded = []
    for word in words:
        letters = [ch for ch in word if "A" <= ch <= "Z"]
        raw = []
        for i, ch in enumerate(letters):
            prev = letters[i - 1] if i > 0 else ""
            nxt = letters[i + 1] if i + 1 < len(letters) else ""
            raw.append(_cologne_code(prev, ch, nxt, first=i == 0))
        digits = "".join(raw)
        collapsed = []
        for digit in digits:
            if not collapsed or collapsed[-1] != digit:
                collapsed.append(digit)
        if not collapsed:
            continue
        code = collapsed[0] + "".join(d for d in collapsed[1:] if d != "0")
        encoded.append(code)
    return " ".join(encoded)


__all__ = ["cologne_phonetic", "normalize_canonical", "normalize_lower_no_diacritics"]
