"""
Song Ranker CLI - Entry point

Offline tools around the ranking engine: clean a track list, simulate a
ranking session, or compute a single Elo update.
"""

import argparse
import random
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from rich.markup import escape
from rich.table import Table

from song_ranker import __version__
from song_ranker.core.config import Config, load_config
from song_ranker.core.console import get_console, print_error, print_warning, safe_print
from song_ranker.core.output import setup_from_config


def _read_titles(source: str) -> list[str]:
    if source == "-":
        lines = sys.stdin.read().splitlines()
    else:
        lines = Path(source).read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip()]


def run_dedupe(cfg: Config, source: str, threshold: Optional[int], apply: bool) -> int:
    """Show excluded tracks and duplicate groups for a title list.

    Args:
        cfg: Loaded configuration
        source: File with one title per line, or "-" for stdin
        threshold: Fuzzy similarity threshold override
        apply: Print the cleaned list instead of the review tables

    Returns:
        Exit code (0 for success)
    """
    from song_ranker.domain.library.deduplication import (
        apply_duplicate_resolutions,
        find_potential_duplicates,
        is_excluded_track,
    )

    titles = _read_titles(source)
    excluded = []
    if cfg.deduplication.exclude_instrumentals:
        excluded = [t for t in titles if is_excluded_track(t)]
        titles = [t for t in titles if not is_excluded_track(t)]

    limit = cfg.deduplication.fuzzy_threshold if threshold is None else threshold
    groups = find_potential_duplicates(titles, threshold=limit)
    cleaned = apply_duplicate_resolutions(titles, groups)
    logger.info(
        f"Deduplicated {len(titles)} titles: {len(groups)} groups, {len(excluded)} excluded"
    )

    if apply:
        for title in cleaned:
            print(title)
        return 0

    console = get_console()
    if excluded:
        safe_print(f"Excluded ({len(excluded)}):", style="bold yellow")
        for title in excluded:
            safe_print(f"  ✗ {escape(title)}")
        console.print()

    if groups:
        table = Table(title=f"{len(groups)} duplicate groups")
        table.add_column("#", justify="right")
        table.add_column("Keep")
        table.add_column("Duplicates")
        table.add_column("Confidence", justify="right")
        for number, group in enumerate(groups, start=1):
            table.add_row(
                str(number),
                escape(group.canonical),
                escape("\n".join(group.matches[1:])),
                f"{group.confidence}%",
            )
        console.print(table)
    else:
        safe_print("No duplicates found", style="green")

    safe_print(f"{len(titles)} songs -> {len(cleaned)} after merging")
    if len(cleaned) > cfg.session.large_session_warning:
        print_warning(
            f"Ranking {len(cleaned)} songs might take a long time. "
            f"Sessions under {cfg.session.large_session_warning} songs work best."
        )
    return 0


def run_simulate(
    cfg: Config,
    num_songs: int,
    num_comparisons: int,
    strategy: Optional[str],
    favourite: Optional[str],
    seed: Optional[int],
) -> int:
    """Simulate a ranking session and print the resulting leaderboard.

    Returns:
        Exit code (0 for success)
    """
    from song_ranker.domain.rating.simulation import (
        create_mock_songs,
        favourite_wins,
        random_winner,
        simulate_session,
    )

    if seed is not None:
        random.seed(seed)

    strategy_name = strategy or cfg.ranking.strategy
    songs = create_mock_songs(num_songs)
    decide = favourite_wins(favourite) if favourite else random_winner
    result = simulate_session(songs, num_comparisons, decide, strategy=strategy_name)

    table = Table(title=f"{strategy_name} strategy: {result.comparisons} duels, {num_songs} songs")
    table.add_column("Rank", justify="right")
    table.add_column("Song")
    table.add_column("Elo", justify="right")
    table.add_column("Comparisons", justify="right")
    for rank, song in enumerate(result.ranking()[:10], start=1):
        marker = " ⭐" if song.song_id == favourite else ""
        table.add_row(str(rank), f"{song.name}{marker}", f"{song.local_elo:.1f}", str(song.comparison_count))
    get_console().print(table)

    phases = ", ".join(f"{phase}: {count}" for phase, count in result.phase_counts.items())
    safe_print(f"Phases: {phases}")
    if favourite:
        safe_print(f"{favourite} finished at rank #{result.rank_of(favourite)}", style="bold")
    return 0


def run_rate(
    cfg: Config,
    rating_a: float,
    rating_b: float,
    score: float,
    k_factor: Optional[float],
    decision_ms: Optional[int],
) -> int:
    """Print the Elo update for a single duel."""
    from song_ranker.domain.rating.elo import calculate_k_factor, calculate_new_ratings

    ranking = cfg.ranking
    if k_factor is None:
        if decision_ms is not None:
            k_factor = calculate_k_factor(
                decision_ms,
                fast_ms=ranking.fast_decision_ms,
                slow_ms=ranking.slow_decision_ms,
                fast_k=ranking.fast_k_factor,
                slow_k=ranking.slow_k_factor,
                default_k=ranking.k_factor,
            )
        else:
            k_factor = ranking.k_factor

    new_a, new_b = calculate_new_ratings(rating_a, rating_b, score, k_factor)
    safe_print(f"K = {k_factor:g}")
    safe_print(f"A: {rating_a:.1f} -> {new_a:.1f} ({new_a - rating_a:+.1f})")
    safe_print(f"B: {rating_b:.1f} -> {new_b:.1f} ({new_b - rating_b:+.1f})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="song-ranker",
        description="Pairwise song ranking tools",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, help="Path to config.toml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    dedupe = subparsers.add_parser("dedupe", help="Find duplicate titles in a track list")
    dedupe.add_argument("file", help="File with one title per line ('-' for stdin)")
    dedupe.add_argument("--threshold", type=int, help="Fuzzy similarity threshold (0-100)")
    dedupe.add_argument("--apply", action="store_true", help="Print the merged track list")

    simulate = subparsers.add_parser("simulate", help="Simulate a ranking session")
    simulate.add_argument("--songs", type=int, default=30)
    simulate.add_argument("--comparisons", type=int, default=126)
    simulate.add_argument("--strategy", choices=["adaptive", "legacy"])
    simulate.add_argument("--favorite", help="Song id that wins every duel (e.g. song-15)")
    simulate.add_argument("--seed", type=int)

    rate = subparsers.add_parser("rate", help="Compute one Elo update")
    rate.add_argument("rating_a", type=float)
    rate.add_argument("rating_b", type=float)
    rate.add_argument("score", type=float, choices=[0.0, 0.5, 1.0], help="Score for A")
    k_group = rate.add_mutually_exclusive_group()
    k_group.add_argument("--k", type=float, dest="k_factor")
    k_group.add_argument("--decision-ms", type=int, help="Derive K from decision time")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logger.enable("song_ranker")
    cfg = load_config(args.config)
    setup_from_config(cfg.logging)

    try:
        if args.command == "dedupe":
            return run_dedupe(cfg, args.file, args.threshold, args.apply)
        if args.command == "simulate":
            return run_simulate(
                cfg, args.songs, args.comparisons, args.strategy, args.favorite, args.seed
            )
        return run_rate(
            cfg, args.rating_a, args.rating_b, args.score, args.k_factor, args.decision_ms
        )
    except (OSError, ValueError) as e:
        logger.exception(f"{args.command} failed")
        print_error(escape(str(e)))
        return 1


if __name__ == "__main__":
    sys.exit(main())
