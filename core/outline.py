"""Outline parsing helpers (section markers, hints, section bodies)."""
from __future__ import annotations

import re
from typing import List, Optional, Tuple


# Section headers: "一、", "1. ", "I. " (zh-Hant numerals, arabic, roman).
_HEADER_RE = re.compile(r"^(?P<key>[一二三四五六七八九十]+)、|^(?P<num>[0-9]+)\.\s|^(?P<roman>[IVX]+)\.\s")
_MARKER_TAIL_RE = re.compile(r"^[\s\.、\)）:：\-]+")


def _line_for_key(lines: List[str], section_key: str) -> Tuple[Optional[int], bool]:
    """(line index, marker matched exactly) for the first line starting with the key."""
    key = section_key.strip()
    if not key:
        return None, False
    loose = None
    for idx, raw in enumerate(lines):
        line = raw.strip()
        if not line.startswith(key):
            continue
        rest = line[len(key):]
        # Exact marker match: "I." must not resolve to "II." or "Introduction".
        if not rest or _MARKER_TAIL_RE.match(rest):
            return idx, True
        if loose is None:
            loose = idx
    return loose, False


def section_hint(outline_text: str, section_key: str, max_chars: int = 160) -> str:
    """Text of the outline line for ``section_key`` without its marker."""
    lines = (outline_text or "").splitlines()
    idx, exact = _line_for_key(lines, section_key)
    if idx is None:
        return ""
    line = lines[idx].strip()
    if exact:
        line = _MARKER_TAIL_RE.sub("", line[len(section_key.strip()):])
    return line[:max_chars].strip()


def list_section_keys(outline_text: str) -> List[str]:
    keys: List[str] = []
    for raw in (outline_text or "").splitlines():
        match = _HEADER_RE.match(raw.strip())
        if not match:
            continue
        key = match.group('key') or match.group('num') or match.group('roman')
        if key and key not in keys:
            keys.append(key)
    return keys


def extract_section_text(outline_text: str, section_key: str) -> str:
    """Lines from the section's header up to (not including) the next header."""
    lines = (outline_text or "").splitlines()
    start, _ = _line_for_key(lines, section_key)
    if start is None:
        return ""
    end = len(lines)
    for offset, raw in enumerate(lines[start + 1:], start=start + 1):
        if _HEADER_RE.match(raw.strip()):
            end = offset
            break
    return "\n".join(lines[start:end]).strip()
