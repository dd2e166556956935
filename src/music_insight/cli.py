from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import Callable

from loguru import logger

from .collage import collage_filename, create_collage, is_image_filename, save_collage
from .config import Config
from .errors import MusicInsightError
from .filters import Criteria, criteria_fields, filter_records
from .library import load_albums, load_covers, load_songs
from .metadata import read_track
from .models import ScanResult
from .ordering import sort_by_palette
from .reports import (
    count_genres,
    count_moods,
    count_summary,
    count_words,
    count_years,
    format_duration,
    missing_lyrics_dirs,
    playlist_entries,
    time_summary,
    what_to_play,
    write_playlist,
)


COUNT_GROUPS = ("years", "genres", "moods", "words")


def _make_progress_printer(stage: str) -> Callable[[int, int], None]:
    is_tty = sys.stdout.isatty()
    last_percent = -1

    def _report(current: int, total: int) -> None:
        nonlocal last_percent
        percent = 100 if total <= 0 else int((current / total) * 100)
        percent = max(0, min(100, percent))

        if is_tty:
            if percent == last_percent and current < total:
                return
            end = "\n" if current >= total else ""
            print(f"\r[{stage}] {percent:3d}% ({current}/{total})", end=end, flush=True)
            last_percent = percent
            return

        should_print = (
            last_percent < 0
            or current >= total
            or percent >= last_percent + 10
        )
        if should_print:
            print(f"[{stage}] {percent:3d}% ({current}/{total})")
            last_percent = percent

    return _report


def _print_table(headers: tuple[str, str], rows: list[tuple[object, object]]) -> None:
    width = max([len(str(headers[0]))] + [len(str(key)) for key, _ in rows])
    print(f"{headers[0]:<{width}}  {headers[1]}")
    for key, value in rows:
        print(f"{str(key):<{width}}  {value}")


def _report_warnings(args: argparse.Namespace, result: ScanResult) -> None:
    if result.cache_error is not None:
        args.cache_errors.append(result.cache_error)
    if result.warnings:
        print(f"[warn] skipped files: {len(result.warnings)}")
        for warning in result.warnings:
            logger.warning(warning)


def _criteria(args: argparse.Namespace) -> Criteria:
    values = {name: getattr(args, name) for name in criteria_fields() if hasattr(args, name)}
    return Criteria(**values)


def _add_date_filters(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-d", "--day", type=int, help="Day of release ex. 2")
    parser.add_argument("-D", "--decade", type=int, help="Decade of release ex. 1980")
    parser.add_argument("-m", "--month", type=int, help="Month of release ex. 5")
    parser.add_argument("-y", "--year", type=int, help="Year of release ex. 2020")


def _add_album_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-a",
        "--album",
        dest="albums_only",
        action="store_true",
        help="Collect by albums rather than songs",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mic",
        description="A general tool around querying a local music collection.",
    )
    parser.add_argument("--music-dir", type=Path, default=None, help="Music collection root")
    parser.add_argument("--cache-dir", type=Path, default=None, help="Directory for cache snapshots")
    parser.add_argument("--collage-dir", type=Path, default=None, help="Directory for generated collages")
    parser.add_argument("--workers", type=int, default=None, help="Extraction worker threads")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Abort on the first unreadable file instead of skipping it",
    )
    parser.add_argument("--verbose", action="store_true", help="Print debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    count = commands.add_parser("count", help="Count number of songs by group")
    count.add_argument(
        "group",
        nargs="?",
        choices=COUNT_GROUPS,
        help="Group counts by release year, genre, mood or lyric word",
    )
    _add_date_filters(count)
    _add_album_flag(count)
    count.add_argument("-g", "--genre", help='Genre names ex. "Synth,Metal,Punk"')
    count.add_argument("-M", "--moods", help='Mood names ex. "eclectic,warm,dark"')
    count.add_argument("-l", "--length", type=int, help="Return only the top entries")

    playlist = commands.add_parser("playlist", help="Generates a playlist based on certain filters")
    _add_date_filters(playlist)
    playlist.add_argument("-a", "--album", help='Album title ex. "Dookie"')
    playlist.add_argument("-A", "--artist", help='Name of the artist ex. "Green Day"')
    playlist.add_argument("-g", "--genre", help='Genre names ex. "Synth,Metal,Punk"')
    playlist.add_argument("-M", "--moods", help='Mood names ex. "eclectic,warm,dark"')
    playlist.add_argument("-l", "--length", type=int, help="Maximum playlist length")
    playlist.add_argument("-t", "--track", help="Filter by track number")
    playlist.add_argument("-w", "--week", action="store_true", help="Released in the current week")
    playlist.add_argument("-W", "--words", help="Lyrics containing any of these words")
    playlist.add_argument("-i", "--instrumental", action="store_true", help="Only instrumental tracks")
    playlist.add_argument("-u", "--upcoming", action="store_true", help="Release day still ahead this year")
    playlist.add_argument("-r", "--random", action="store_true", help="Randomize order of list")
    playlist.add_argument("name", nargs="?", help="Playlist file name without extension")

    time = commands.add_parser("time", help="Gives insight into runtimes of albums or the collection")
    time.add_argument("-D", "--decade", type=int)
    time.add_argument("-y", "--year", type=int)
    time.add_argument("-m", "--month", type=int)
    time.add_argument("-g", "--genre")
    time.add_argument("-A", "--artist")
    time.add_argument("-a", "--album")

    wtp = commands.add_parser("wtp", help="What records to play based on release ranges")
    _add_date_filters(wtp)
    wtp.add_argument("-w", "--week", action="store_true", help="Released in the current week")
    wtp.add_argument("-u", "--upcoming", action="store_true", help="Release day still ahead this year")

    accg = commands.add_parser("accg", help="Album cover collage generator")
    _add_date_filters(accg)
    accg.add_argument("-a", "--artist", help='Name of the artist ex. "Green Day"')
    accg.add_argument("-g", "--genre", help='Genre names ex. "Synth,Metal,Punk"')
    accg.add_argument("-M", "--moods", help='Mood names ex. "eclectic,warm,dark"')
    accg.add_argument("-w", "--week", action="store_true", help="Released in the current week")
    accg.add_argument("name", nargs="?", help="Output image file name")

    info = commands.add_parser("info", help="Print the tags of a single file")
    info.add_argument("path", type=Path)

    commands.add_parser("missing", help="List album directories without lyrics")
    return parser


def build_config(args: argparse.Namespace) -> Config:
    config = Config.default()
    overrides: dict[str, object] = {"strict": args.strict}
    if args.music_dir is not None:
        overrides["music_dir"] = args.music_dir.expanduser().resolve()
    if args.cache_dir is not None:
        overrides["cache_dir"] = args.cache_dir.expanduser().resolve()
    if args.collage_dir is not None:
        overrides["collage_dir"] = args.collage_dir.expanduser().resolve()
    if args.workers is not None:
        overrides["workers"] = args.workers
    return dataclasses.replace(config, **overrides)


def _tracks(args: argparse.Namespace, config: Config, albums_only: bool) -> ScanResult:
    loader = load_albums if albums_only else load_songs
    result = loader(config, progress_callback=_make_progress_printer("scan"))
    _report_warnings(args, result)
    return result


def run_count(args: argparse.Namespace, config: Config) -> None:
    tracks = filter_records(_tracks(args, config, args.albums_only).records, _criteria(args))
    unit = "# of Albums" if args.albums_only else "# of Songs"

    if args.group == "years":
        _print_table(("Years", unit), count_years(tracks))
    elif args.group == "genres":
        _print_table(("Genres", unit), count_genres(tracks, args.length))
    elif args.group == "moods":
        _print_table(("Moods", unit), count_moods(tracks, args.length))
    elif args.group == "words":
        _print_table(("Words", unit), count_words(tracks, args.length))
    else:
        _print_table(("Name", "Total"), count_summary(tracks, args.albums_only))


def run_playlist(args: argparse.Namespace, config: Config) -> None:
    tracks = filter_records(_tracks(args, config, False).records, _criteria(args))
    entries = playlist_entries(tracks, config.music_dir, args.random, args.length)

    if args.name:
        target = write_playlist(args.name, entries, Path.cwd())
        print(f"[write] playlist: {target}")
        return
    for entry in entries:
        print(entry)


def run_time(args: argparse.Namespace, config: Config) -> None:
    tracks = filter_records(_tracks(args, config, False).records, _criteria(args))
    if not tracks:
        print("[done] no tracks matched")
        return
    summary = time_summary(tracks)
    _print_table(
        ("Name", "Times"),
        [
            ("Shortest album", format_duration(summary.shortest_album)),
            ("Avg album length", format_duration(summary.average_album)),
            ("Longest album", format_duration(summary.longest_album)),
            ("Shortest song", format_duration(summary.shortest_song)),
            ("Avg song length", format_duration(summary.average_song)),
            ("Longest song", format_duration(summary.longest_song)),
            ("Total song length", format_duration(summary.total)),
        ],
    )


def run_wtp(args: argparse.Namespace, config: Config) -> None:
    albums = filter_records(_tracks(args, config, True).records, _criteria(args))
    for line in what_to_play(albums):
        print(line)


def run_accg(args: argparse.Namespace, config: Config) -> None:
    criteria = _criteria(args)
    if args.name:
        if not is_image_filename(args.name):
            raise SystemExit(f"Invalid image file name: {args.name}")
        target = Path(args.name).expanduser().resolve()
    else:
        target = config.collage_dir / collage_filename(criteria)

    result = load_covers(config, progress_callback=_make_progress_printer("covers"))
    _report_warnings(args, result)
    covers = sort_by_palette(filter_records(result.records, criteria))
    if not covers:
        raise SystemExit("No album covers matched the given filters")

    collage = create_collage(covers, config.collage_max_width, config.collage_max_height)
    print(save_collage(collage, target))


def run_info(args: argparse.Namespace, config: Config) -> None:
    track = read_track(args.path.expanduser().resolve())
    for key, value in track.to_dict().items():
        print(f"{key}: {value}")


def run_missing(args: argparse.Namespace, config: Config) -> None:
    for directory in missing_lyrics_dirs(_tracks(args, config, False).records):
        print(directory)


COMMANDS: dict[str, Callable[[argparse.Namespace, Config], None]] = {
    "count": run_count,
    "playlist": run_playlist,
    "time": run_time,
    "wtp": run_wtp,
    "accg": run_accg,
    "info": run_info,
    "missing": run_missing,
}


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")

    config = build_config(args)
    if args.command != "info" and not config.music_dir.is_dir():
        raise SystemExit(f"Music directory does not exist or is not a directory: {config.music_dir}")

    args.cache_errors = []
    try:
        COMMANDS[args.command](args, config)
    except MusicInsightError as exc:
        raise SystemExit(str(exc))

    if args.cache_errors:
        for error in args.cache_errors:
            print(f"[warn] cache not saved: {error}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
