"""
Module 3 - Line Assembler
Joins backslash-continued physical lines into logical ConfigurationLines,
normalizes their whitespace and substitutes Define variables.
"""

import re
from typing import Callable, Iterator, List, Optional, Sequence

from core.models import ConfigurationLine, Define  # pyre-ignore
from core.patterns import is_comment_match  # pyre-ignore


Substitute = Callable[[Sequence[Define], str], str]

_CONTINUATION_RE = re.compile(r'\s*\\\s*\n')
_TRAILING_CONTINUATION_RE = re.compile(r'\s*\\\s*$')
_WHITESPACE_RE = re.compile(r'\s+')


class LineAssembler:
    """Builds ConfigurationLines from the physical lines of one file."""

    def __init__(self, defines: Optional[Sequence[Define]] = None,
                 substitute: Optional[Substitute] = None):
        """
        Args:
            defines: Snapshot of Define variables, resolved before the pass.
            substitute: Callable replacing variable references in a line,
                given the snapshot and the text.
        """
        self.defines: List[Define] = list(defines or [])
        self._substitute = substitute

    def process_line(self, raw_text: str) -> str:
        """Reduce the raw text of a logical line to its processed form."""
        processed = _CONTINUATION_RE.sub(' ', raw_text)
        processed = _TRAILING_CONTINUATION_RE.sub('', processed)
        processed = _WHITESPACE_RE.sub(' ', processed).strip()
        if self._substitute and self.defines:
            processed = self._substitute(self.defines, processed)
        return processed

    def assemble(self, source_file: str, physical_lines: Sequence[str]) -> Iterator[ConfigurationLine]:
        """
        Yield one ConfigurationLine per logical line, in file order.

        A physical line whose trimmed text ends with a backslash continues on
        the next one. A continuation left open at end of file still yields a line.
        """
        pending: List[str] = []
        start_line = 0

        for line_num, physical in enumerate(physical_lines, start=1):
            if not pending:
                start_line = line_num
            pending.append(physical)

            if physical.strip().endswith('\\'):
                continue

            yield self._build(source_file, pending, start_line, line_num)
            pending = []

        if pending:
            yield self._build(source_file, pending, start_line, start_line + len(pending) - 1)

    def _build(self, source_file: str, physical: List[str],
               start_line: int, end_line: int) -> ConfigurationLine:
        raw_text = '\n'.join(physical)
        processed = self.process_line(raw_text)
        return ConfigurationLine(
            raw_text=raw_text,
            processed_text=processed,
            source_file=source_file,
            is_comment=is_comment_match(processed),
            start_line=start_line,
            end_line=end_line,
        )
