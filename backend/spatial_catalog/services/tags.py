"""Resolve entry to vocabulary-term links into per-entry id and label lists."""

# purpose: associate many-to-many facet tags with entries for display and filtering
# status: active

from __future__ import annotations

from typing import Hashable, Iterable, Mapping, NamedTuple


class TagLink(NamedTuple):
    """One decoded link row: entry ``entry_id`` is tagged with ``term_id``."""

    entry_id: Hashable
    term_id: Hashable


def group_term_ids(
    entry_ids: Iterable[Hashable],
    links: Iterable[TagLink],
) -> dict[Hashable, list[Hashable]]:
    """Map every entry in view to the term ids linked to it.

    Order follows the first time a link is seen; repeated links collapse.
    Links for entries outside ``entry_ids`` are ignored and entries without
    links map to an empty list.
    """

    grouped: dict[Hashable, list[Hashable]] = {entry_id: [] for entry_id in entry_ids}
    for link in links:
        bucket = grouped.get(link.entry_id)
        if bucket is None or link.term_id in bucket:
            continue
        bucket.append(link.term_id)
    return grouped


def resolve_labels(
    entry_ids: Iterable[Hashable],
    links: Iterable[TagLink],
    vocabulary: Mapping[Hashable, str],
) -> dict[Hashable, list[str]]:
    """Map every entry in view to the labels of its linked terms.

    Term ids missing from ``vocabulary`` (stale references) are dropped.
    """

    grouped = group_term_ids(entry_ids, links)
    return {
        entry_id: [vocabulary[term_id] for term_id in term_ids if term_id in vocabulary]
        for entry_id, term_ids in grouped.items()
    }


def sorted_labels(labels: Iterable[str]) -> list[str]:
    """Alphabetical display order, case-insensitive."""

    return sorted(labels, key=lambda label: (label.casefold(), label))
