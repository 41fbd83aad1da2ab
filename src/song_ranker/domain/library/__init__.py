"""Library domain - songs entering a ranking session.

This domain handles:
- Song data models
- Title normalization and duplicate detection
- Collapsing session-builder selections into songs
"""

# Models
from .models import (
    INITIAL_ELO,
    ComparisonRecord,
    RankingSource,
    SessionSong,
    SongInput,
)

# Deduplication
from .deduplication import (
    DuplicateGroup,
    apply_duplicate_resolutions,
    calculate_similarity,
    filter_tracks,
    find_potential_duplicates,
    is_excluded_track,
    normalize_title,
    prepare_song_inputs,
    resolve_sources_to_songs,
)

__all__ = [
    # Models
    "INITIAL_ELO",
    "ComparisonRecord",
    "RankingSource",
    "SessionSong",
    "SongInput",
    # Deduplication
    "DuplicateGroup",
    "apply_duplicate_resolutions",
    "calculate_similarity",
    "filter_tracks",
    "find_potential_duplicates",
    "is_excluded_track",
    "normalize_title",
    "prepare_song_inputs",
    "resolve_sources_to_songs",
]
