from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Iterator, List

from .config import AnalysisConfig
from .models import RawRow


@lru_cache(maxsize=8)
def _split_pattern(delimiter: str, quote_char: str) -> "re.Pattern[str]":
    # A delimiter splits only when an even number of quotes follows it,
    # i.e. when it is not inside a quoted field.
    q = re.escape(quote_char)
    return re.compile(
        rf"{re.escape(delimiter)}(?=(?:[^{q}]*{q}[^{q}]*{q})*[^{q}]*$)"
    )


def _unquote(field: str, quote_char: str) -> str:
    s = field.strip()
    if len(s) >= 2 and s.startswith(quote_char) and s.endswith(quote_char):
        s = s[1:-1].replace(quote_char * 2, quote_char)
    return s


def split_line(line: str, delimiter: str = ",", quote_char: str = '"') -> List[str]:
    """
    Split one delimited line into fields.

    Delimiters inside a quoted field are kept; surrounding quotes are stripped
    after the split and doubled quotes ("") collapse to one.

        >>> split_line('a,"b, c",d')
        ['a', 'b, c', 'd']
    """
    line = line.rstrip("\r\n")
    parts = _split_pattern(delimiter, quote_char).split(line)
    return [_unquote(p, quote_char) for p in parts]


def iter_raw_rows(lines: Iterable[str], cfg: AnalysisConfig) -> Iterator[RawRow]:
    """
    Yield one RawRow per data line.

    The first line is the header and is skipped by position, whatever it
    contains. Whitespace-only lines come back as blank rows so the caller can
    count them separately from rejections.
    """
    row_number = 0
    for i, line in enumerate(lines):
        if i == 0:
            continue
        row_number += 1
        if not line.strip():
            yield RawRow(row_number=row_number, blank=True)
            continue
        fields = split_line(line, cfg.delimiter, cfg.quote_char)
        yield RawRow(row_number=row_number, fields=tuple(fields))


def has_min_columns(row: RawRow, cfg: AnalysisConfig) -> bool:
    return len(row.fields) >= cfg.min_columns
