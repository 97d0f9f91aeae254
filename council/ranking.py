"""Ranking text parsing and aggregate scoring for Stage 2."""

import re
from collections import defaultdict
from collections.abc import Iterable

from council.labels import LABEL_PREFIX
from council.models import AggregateRankingEntry, RankingResult

_LABEL_TOKEN = re.compile(r"\b(?i:response)\s+([A-Z]\d*)\b")
_BARE_CHAIN = re.compile(r"\b[A-Z]\d*\b(?:\s*[>,]\s*\b[A-Z]\d*\b)+")
_BARE_TOKEN = re.compile(r"\b[A-Z]\d*\b")
_BARE_ITEM = re.compile(r"^\s*(?:\d+[.)]|[-*])\s*[*_]*([A-Z]\d*)\b")
_LIST_ITEM = re.compile(r"^\s*(?:\d+[.)]|[-*])\s")
_FINAL_MARKER = re.compile(r"\bfinal\s+ranking\b[ \t*_]*:", re.IGNORECASE)
_PLAIN_MARKER = re.compile(r"\branking\b[ \t*_]*:", re.IGNORECASE)


def _first_seen(labels: Iterable[str], valid: set[str]) -> list[str]:
    seen: list[str] = []
    for label in labels:
        if label in valid and label not in seen:
            seen.append(label)
    return seen


def _label_tokens(text: str) -> list[str]:
    return [f"{LABEL_PREFIX} {m.group(1)}" for m in _LABEL_TOKEN.finditer(text)]


def _bare_chain_tokens(text: str) -> list[str]:
    match = _BARE_CHAIN.search(text)
    if not match:
        return []
    return [f"{LABEL_PREFIX} {t}" for t in _BARE_TOKEN.findall(match.group(0))]


def _line_labels(line: str) -> list[str]:
    """Labels named on one line: "Response X" tokens, a bare list item, or a bare chain."""
    tokens = _label_tokens(line)
    if tokens:
        return tokens
    item = _BARE_ITEM.match(line)
    if item:
        return [f"{LABEL_PREFIX} {item.group(1)}"]
    return _bare_chain_tokens(line)


def _section_labels(section: str, valid: set[str]) -> list[str]:
    # The section ends at the first line that names no label. Before the list
    # starts, lead-in lines ending in ":" are skipped. Once a numbered or
    # bulleted list starts, only list items continue it, and each item counts
    # only its first label.
    found: list[str] = []
    in_list = False
    for line in section.splitlines():
        stripped = line.strip(" \t*_#")
        if not stripped:
            continue
        labels = _line_labels(line)
        is_item = bool(_LIST_ITEM.match(line))
        if is_item:
            labels = labels[:1]
        if not found:
            if not labels:
                if stripped.endswith(":"):
                    continue
                break
            in_list = is_item
        elif not labels or (in_list and not is_item):
            break
        found.extend(labels)
    return _first_seen(found, valid)


def _densest_run(text: str, valid: set[str]) -> list[str]:
    # Consecutive lines that each mention a valid label; blank lines don't break a run.
    runs: list[list[str]] = []
    current: list[str] = []
    for line in text.splitlines():
        found = [label for label in _label_tokens(line) if label in valid]
        if found:
            current.extend(found)
        elif line.strip():
            if current:
                runs.append(current)
            current = []
    if current:
        runs.append(current)

    best: list[str] = []
    for run in runs:
        candidate = _first_seen(run, valid)
        if len(candidate) >= len(best):
            best = candidate
    return best


def parse_ranking_from_text(text: str, valid_labels: Iterable[str]) -> list[str]:
    """Extract an ordered list of labels from a model's free-text ranking.

    The list after the last "FINAL RANKING:" marker is authoritative: labels
    may appear as "Response X" tokens, bare list items ("1. C") or a bare
    chain ("A > C > B"), and the list ends at the first line naming no label.
    If that list is empty the result is empty; nothing is inferred from the
    rest of the text.

    Without a "FINAL RANKING:" marker, the list after the last plain
    "Ranking:" marker is used when it names a valid label, and otherwise the
    densest run of lines naming labels.

    Unknown labels are dropped; the first occurrence of a label fixes its
    position and later repeats are ignored.
    """
    valid = set(valid_labels)
    if not text or not valid:
        return []

    final_markers = list(_FINAL_MARKER.finditer(text))
    if final_markers:
        return _section_labels(text[final_markers[-1].end():], valid)

    plain_markers = list(_PLAIN_MARKER.finditer(text))
    if plain_markers:
        labels = _section_labels(text[plain_markers[-1].end():], valid)
        if labels:
            return labels
    return _densest_run(text, valid)


def calculate_aggregate_rankings(
    rankings: list[RankingResult],
    label_to_model: dict[str, str],
) -> list[AggregateRankingEntry]:
    """Average the 1-based rank each label received across all rankers.

    Sorted best first: ascending average rank, then more votes, then the
    label's Stage 1 position. Labels nobody ranked are left out.
    """
    order = {label: i for i, label in enumerate(label_to_model)}
    positions: dict[str, list[int]] = defaultdict(list)

    for ranking in rankings:
        seen: set[str] = set()
        for position, label in enumerate(ranking.parsed_ranking, start=1):
            if label not in label_to_model or label in seen:
                continue
            seen.add(label)
            positions[label].append(position)

    entries = [
        AggregateRankingEntry(
            model=label_to_model[label],
            label=label,
            average_rank=sum(ranks) / len(ranks),
            rankings_count=len(ranks),
        )
        for label, ranks in positions.items()
    ]
    entries.sort(key=lambda e: (e.average_rank, -e.rankings_count, order[e.label]))
    return entries
