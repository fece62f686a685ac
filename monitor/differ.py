"""
Line diffs between two versions of a website's content.

Produces a short, notification-sized rendering: changed lines with a little
leading context, a line cap, and a one-line summary on top.
"""

from enum import Enum
from typing import List, Tuple


class ChangeKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


ChangeRecord = Tuple[ChangeKind, List[str]]


class ContentDiffer:
    """Renders bounded, human-readable line diffs."""

    def __init__(self, context_lines: int = 2, max_lines: int = 50):
        """
        Args:
            context_lines: Unchanged lines shown before each change run
            max_lines: Rendered lines kept before truncation
        """
        self.context_lines = context_lines
        self.max_lines = max_lines

    def diff(self, old_content: str, new_content: str) -> str:
        """
        Diff two versions of a page.

        Args:
            old_content: Previously stored content
            new_content: Freshly extracted content

        Returns:
            ``Changes summary: N additions, M deletions``, a blank line and
            the rendered diff body
        """
        lines: List[str] = []
        additions = 0
        deletions = 0
        pending_context: List[str] = []

        for kind, run in self.change_records(old_content, new_content):
            run = [line for line in run if line != ""]

            if kind == ChangeKind.UNCHANGED:
                if self.context_lines > 0:
                    pending_context.extend(run)
                    pending_context = pending_context[-self.context_lines * 2:]
                continue

            for context in pending_context[-self.context_lines:]:
                lines.append(f"  {context.rstrip()}")
            pending_context = []

            prefix = "+" if kind == ChangeKind.ADDED else "-"
            for line in run:
                lines.append(f"{prefix} {line.rstrip()}")
            if kind == ChangeKind.ADDED:
                additions += len(run)
            else:
                deletions += len(run)

        body = "\n".join(lines[:self.max_lines])
        if len(lines) > self.max_lines:
            body += f"\n... and {len(lines) - self.max_lines} more lines"

        return f"Changes summary: {additions} additions, {deletions} deletions\n\n{body}"

    def change_records(self, old_content: str, new_content: str) -> List[ChangeRecord]:
        """
        Split two texts into ordered added/removed/unchanged line runs.

        Lines are compared exactly, whitespace included, and matched along a
        longest common subsequence. Within each gap between unchanged runs the
        removed lines come before the added lines.
        """
        old_lines = old_content.split("\n")
        new_lines = new_content.split("\n")

        start = 0
        while start < min(len(old_lines), len(new_lines)) and old_lines[start] == new_lines[start]:
            start += 1
        end = 0
        while (end < min(len(old_lines), len(new_lines)) - start
               and old_lines[-1 - end] == new_lines[-1 - end]):
            end += 1

        old_middle = old_lines[start:len(old_lines) - end]
        new_middle = new_lines[start:len(new_lines) - end]

        records: List[ChangeRecord] = []
        if start:
            records.append((ChangeKind.UNCHANGED, old_lines[:start]))

        removed: List[str] = []
        added: List[str] = []
        for kind, line in self._lcs_walk(old_middle, new_middle):
            if kind == ChangeKind.REMOVED:
                removed.append(line)
            elif kind == ChangeKind.ADDED:
                added.append(line)
            else:
                self._flush_gap(records, removed, added)
                removed, added = [], []
                if records and records[-1][0] == ChangeKind.UNCHANGED:
                    records[-1][1].append(line)
                else:
                    records.append((ChangeKind.UNCHANGED, [line]))
        self._flush_gap(records, removed, added)

        if end:
            tail = old_lines[len(old_lines) - end:]
            if records and records[-1][0] == ChangeKind.UNCHANGED:
                records[-1][1].extend(tail)
            else:
                records.append((ChangeKind.UNCHANGED, tail))

        return records

    @staticmethod
    def _lcs_walk(old_lines: List[str], new_lines: List[str]) -> List[Tuple[ChangeKind, str]]:
        """Line-by-line edit script along a longest common subsequence."""
        n, m = len(old_lines), len(new_lines)
        # lengths[i][j] is the LCS length of old_lines[i:] and new_lines[j:]
        lengths = [[0] * (m + 1) for _ in range(n + 1)]
        for i in range(n - 1, -1, -1):
            row, below = lengths[i], lengths[i + 1]
            for j in range(m - 1, -1, -1):
                if old_lines[i] == new_lines[j]:
                    row[j] = below[j + 1] + 1
                else:
                    row[j] = max(below[j], row[j + 1])

        steps = []
        i = j = 0
        while i < n and j < m:
            if old_lines[i] == new_lines[j]:
                steps.append((ChangeKind.UNCHANGED, old_lines[i]))
                i += 1
                j += 1
            elif lengths[i + 1][j] >= lengths[i][j + 1]:
                steps.append((ChangeKind.REMOVED, old_lines[i]))
                i += 1
            else:
                steps.append((ChangeKind.ADDED, new_lines[j]))
                j += 1
        steps.extend((ChangeKind.REMOVED, line) for line in old_lines[i:])
        steps.extend((ChangeKind.ADDED, line) for line in new_lines[j:])

        return steps

    @staticmethod
    def _flush_gap(records: List[ChangeRecord], removed: List[str], added: List[str]) -> None:
        if removed:
            records.append((ChangeKind.REMOVED, removed))
        if added:
            records.append((ChangeKind.ADDED, added))


def generate_diff(old_content: str, new_content: str) -> str:
    return ContentDiffer().diff(old_content, new_content)
