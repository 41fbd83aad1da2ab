"""
Song ranking domain models.

Contains data structures for songs entering a ranking session, the songs of a
live session, persisted duels, and the selections a session is built from.
"""

from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

INITIAL_ELO = 1500.0

SOURCE_TYPES = ("artist_all", "artist_partial", "playlist", "manual")


class SongInput(NamedTuple):
    """A song picked by the user before a session exists."""
    name: str
    artist: str
    album: Optional[str] = None
    spotify_id: Optional[str] = None
    cover_url: Optional[str] = None


class SessionSong(NamedTuple):
    """A song inside a ranking session.

    Records are immutable. Rating updates build new records with ``_replace``
    so a pool handed to the pairing engine never changes underneath it.

    ``bt_strength`` is the backend's Bradley-Terry log-strength and stays None
    until the backend has computed a batch. ``comparison_count`` counts only
    duels that carried a preference (wins, losses, ties), never skips.
    """
    song_id: str
    name: str = "Unknown Track"
    artist: str = "Unknown Artist"
    album: Optional[str] = None
    spotify_id: Optional[str] = None
    cover_url: Optional[str] = None
    local_elo: float = INITIAL_ELO
    bt_strength: Optional[float] = None
    comparison_count: int = 0


class ComparisonRecord(NamedTuple):
    """A persisted duel, as returned by the backend when resuming a session."""
    song_a_id: str
    song_b_id: str
    winner_id: Optional[str] = None
    is_tie: bool = False
    decision_time_ms: Optional[int] = None

    @property
    def is_skip(self) -> bool:
        """True when the user declined to choose (no winner, not a tie)."""
        return self.winner_id is None and not self.is_tie


@dataclass
class RankingSource:
    """One selection in the session builder (an artist, some releases, a playlist...).

    ``resolved_tracks`` is filled once the source's track list has been fetched;
    unresolved sources contribute no songs.
    """
    id: str
    name: str
    source_type: str = "manual"
    artist_name: Optional[str] = None
    selected_release_ids: List[str] = field(default_factory=list)
    resolved_tracks: List[SongInput] = field(default_factory=list)

    def validate(self) -> None:
        """Validate the source type.

        Raises:
            ValueError: If source_type is not a known type
        """
        if self.source_type not in SOURCE_TYPES:
            raise ValueError(
                f"Invalid source type: {self.source_type!r}. "
                f"Valid types are: {', '.join(SOURCE_TYPES)}"
            )
