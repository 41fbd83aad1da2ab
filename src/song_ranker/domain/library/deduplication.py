"""
Duplicate detection for song lists.

Artist discographies are full of the same song released several times:
remasters, live cuts, remixes, "Taylor's Version" re-recordings. This module
normalizes titles and clusters near-identical ones so the session builder can
offer to collapse them before ranking starts.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, TypeVar

from loguru import logger

from .models import RankingSource, SongInput

FUZZY_THRESHOLD = 85
LENGTH_RATIO_CUTOFF = 0.7

_TAG_WORDS = (
    r"live|demo|remaster(?:ed)?|remix(?:ed)?|edit|version|acoustic|extended"
    r"|instrumental|acapella|a capella|a cappella|mono|stereo"
)

# A hyphenated suffix made only of tags: "2009 Remaster", "Radio Edit", "Live at ..."
_HYPHEN_TAG = (
    r"(?:\d{4}\s+)?(?:(?:radio|single|album|club|original)\s+)?"
    rf"(?:{_TAG_WORDS})\b(?:\s+(?:version|mix|edit))?(?:\s+\d{{4}})?"
    r"(?:\s+(?:at|from|in|on)\b[^-]*)?"
)

# Applied to lowercased titles, in order
_SUFFIX_PATTERNS = (
    # (feat. X), [with Y], (featuring Z)
    re.compile(r"[\(\[]\s*(?:feat|ft|featuring|with)\b[^\(\)\[\]]*[\)\]]"),
    # (Live at Wembley), (2009 Remaster), [Rico Nasty Remix], (Taylor's Version)
    re.compile(rf"[\(\[][^\(\)\[\]]*\b(?:{_TAG_WORDS})\b[^\(\)\[\]]*[\)\]]"),
    # Song - Remastered 2011, Song - 2009 Remaster, Song - Live at the BBC
    re.compile(rf"(?:\s+-\s+{_HYPHEN_TAG})+\s*$"),
)
_APOSTROPHE_RE = re.compile(r"['’`]")
_PUNCTUATION_RE = re.compile(r"[^\w\s]|_")
_WS_RE = re.compile(r"\s+")

_EXCLUDED_RE = re.compile(
    r"[\(\[][^\(\)\[\]]*\b(?:instrumental|acapella|a capella|a cappella)\b[^\(\)\[\]]*[\)\]]"
    r"|\s-\s.*\b(?:instrumental|acapella|a capella|a cappella)\b",
    re.IGNORECASE,
)

T = TypeVar("T")


@dataclass(frozen=True)
class DuplicateGroup:
    """Titles believed to be the same song.

    ``match_indices`` point into the list given to find_potential_duplicates;
    the first entry is the first-seen title, which is also ``canonical``.
    ``confidence`` is 100 for exact normalized matches, otherwise the best
    similarity seen while building the group.
    """
    canonical: str
    matches: List[str]
    match_indices: List[int]
    confidence: int


def normalize_title(title: str) -> str:
    """Normalize a title for duplicate comparison.

    Lowercases, strips version tags (live, remaster, remix, feat. ...),
    removes punctuation and collapses whitespace.

    Examples:
        >>> normalize_title("Song (Live)")
        'song'
        >>> normalize_title("Yesterday - Remastered 2009")
        'yesterday'
        >>> normalize_title("Don't Stop (feat. Someone)")
        'dont stop'
    """
    s = title.lower()
    for pattern in _SUFFIX_PATTERNS:
        s = pattern.sub(" ", s)
    s = _APOSTROPHE_RE.sub("", s)
    s = _PUNCTUATION_RE.sub(" ", s)
    s = _WS_RE.sub(" ", s)
    return s.strip()


def is_excluded_track(title: str) -> bool:
    """Check if a track should never be ranked (instrumental or a cappella version)."""
    return bool(_EXCLUDED_RE.search(title))


def filter_tracks(titles: Iterable[str]) -> List[str]:
    """Drop instrumental and a cappella versions from a title list."""
    return [title for title in titles if not is_excluded_track(title)]


def _levenshtein_distance(a: str, b: str) -> int:
    # Single rolling row over the shorter string
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    current[j - 1] + 1,
                    previous[j] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current

    return previous[len(b)]


def calculate_similarity(s1: str, s2: str) -> int:
    """Similarity between two strings as a whole percentage (0-100).

    Based on Levenshtein distance relative to the longer string. Pairs whose
    length ratio is under 70% score 0 without computing the distance; this
    is an approximation for speed, so a long title and a much shorter one
    never match even when one contains the other.

    Examples:
        >>> calculate_similarity("hello", "hello")
        100
        >>> calculate_similarity("", "x")
        0
    """
    if s1 == s2:
        return 100
    len1, len2 = len(s1), len(s2)
    if len1 == 0 or len2 == 0:
        return 0

    max_length = max(len1, len2)
    min_length = min(len1, len2)
    if min_length / max_length < LENGTH_RATIO_CUTOFF:
        return 0

    distance = _levenshtein_distance(s1, s2)
    return (max_length - distance) * 100 // max_length


def find_potential_duplicates(
    songs: Sequence[str], threshold: int = FUZZY_THRESHOLD
) -> List[DuplicateGroup]:
    """Group titles that are likely the same song.

    Two passes:
    1. Exact: titles whose normalized forms are equal (confidence 100).
    2. Fuzzy: each remaining title, in order, anchors a group and absorbs every
       later remaining title whose normalized similarity is above ``threshold``.

    A title belongs to at most one group. Fuzzy grouping compares against the
    anchor only, so it is not transitive.

    Args:
        songs: Track titles in display order
        threshold: Similarity a fuzzy match must exceed (strictly)

    Returns:
        Duplicate groups, exact matches first. Empty if nothing matched.
    """
    normalized = [normalize_title(title) for title in songs]
    groups: List[DuplicateGroup] = []
    processed: set[int] = set()

    by_key: dict[str, List[int]] = {}
    for idx, key in enumerate(normalized):
        if not key:
            continue
        by_key.setdefault(key, []).append(idx)

    for indices in by_key.values():
        if len(indices) > 1:
            groups.append(
                DuplicateGroup(
                    canonical=songs[indices[0]],
                    matches=[songs[idx] for idx in indices],
                    match_indices=list(indices),
                    confidence=100,
                )
            )
            processed.update(indices)

    exact_count = len(groups)
    # Titles that normalize to nothing ("(Live)", "!!!") never group
    remaining = [
        idx for idx in range(len(songs)) if idx not in processed and normalized[idx]
    ]

    for pos, idx_a in enumerate(remaining):
        if idx_a in processed:
            continue

        match_indices = [idx_a]
        max_similarity = 0

        for idx_b in remaining[pos + 1:]:
            if idx_b in processed:
                continue
            similarity = calculate_similarity(normalized[idx_a], normalized[idx_b])
            if similarity > threshold:
                match_indices.append(idx_b)
                processed.add(idx_b)
                max_similarity = max(max_similarity, similarity)

        if len(match_indices) > 1:
            processed.add(idx_a)
            groups.append(
                DuplicateGroup(
                    canonical=songs[idx_a],
                    matches=[songs[idx] for idx in match_indices],
                    match_indices=match_indices,
                    confidence=max_similarity,
                )
            )

    logger.debug(
        f"Duplicate scan: {len(songs)} titles, {exact_count} exact groups, "
        f"{len(groups) - exact_count} fuzzy groups"
    )
    return groups


def apply_duplicate_resolutions(
    songs: Sequence[T],
    groups: Sequence[DuplicateGroup],
    accepted: Optional[Iterable[int]] = None,
) -> List[T]:
    """Remove duplicates the user agreed to merge.

    Every member of an accepted group except the first (``match_indices[0]``)
    is dropped; everything else keeps its original order.

    Args:
        songs: The list that was scanned (titles or song records)
        groups: Output of find_potential_duplicates for that list
        accepted: Indices into ``groups`` to merge (None merges all)
    """
    accepted_groups = range(len(groups)) if accepted is None else accepted
    to_remove = {
        idx
        for group_idx in accepted_groups
        for idx in groups[group_idx].match_indices[1:]
    }
    return [song for idx, song in enumerate(songs) if idx not in to_remove]


def prepare_song_inputs(
    songs: Iterable[SongInput], exclude_instrumentals: bool = True
) -> List[SongInput]:
    """Collapse raw selections into one SongInput per underlying song.

    Songs are keyed on normalized title plus artist. When a key repeats, the
    shorter title wins (usually the plain one over "... - Remastered 2011")
    but keeps the slot of the first occurrence.

    Args:
        songs: Raw tracks, possibly from several releases
        exclude_instrumentals: Drop instrumental/a cappella versions first

    Returns:
        De-duplicated songs in first-seen order
    """
    slots: dict[tuple[str, str], int] = {}
    result: List[SongInput] = []

    for song in songs:
        if exclude_instrumentals and is_excluded_track(song.name):
            continue
        title_key = normalize_title(song.name) or song.name.strip().lower()
        key = (title_key, song.artist.strip().lower())
        slot = slots.get(key)
        if slot is None:
            slots[key] = len(result)
            result.append(song)
        elif len(song.name) < len(result[slot].name):
            result[slot] = song

    return result


def resolve_sources_to_songs(
    sources: Iterable[RankingSource], exclude_instrumentals: bool = True
) -> List[SongInput]:
    """Flatten session-builder sources into the songs a session will rank.

    Raises:
        ValueError: If a source has an unknown source_type
    """
    sources = list(sources)
    for source in sources:
        source.validate()
    tracks = [track for source in sources for track in source.resolved_tracks]
    songs = prepare_song_inputs(tracks, exclude_instrumentals=exclude_instrumentals)
    logger.debug(f"Resolved {len(tracks)} source tracks to {len(songs)} songs")
    return songs
