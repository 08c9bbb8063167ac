import argparse
import asyncio
import sys
from pathlib import Path

from api_client import SourceClient
from colors import Colors
from config import Config
from downloader import TitleMirror
from errors import MirrorError
from models import TitleIds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="manga-mirror",
        description="Incrementally mirror manga chapters from mangapill to local disk",
    )
    parser.add_argument("-d", "--dir", type=Path, default=Path("."),
                        help="base directory holding one folder per title")
    parser.add_argument("-w", "--workers", type=int, default=Config.worker_count,
                        help="parallel image downloads (default: %(default)s)")
    parser.add_argument("--delay", type=float, default=Config.request_delay,
                        help="pause between chapter page lookups in seconds")
    parser.add_argument("--no-progress", action="store_true", help="disable the progress bar")

    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="register a new title")
    add.add_argument("-m", "--mal-id", type=int, required=True)
    add.add_argument("-p", "--source-id", "--mangapill-id", dest="source_id", type=int, required=True)

    fetch = sub.add_parser("fetch", help="download new chapters of every added title")
    fetch.add_argument("--recover-orphans", action="store_true",
                       help="delete chapter folders left by an interrupted run and fetch them again")

    search = sub.add_parser("search", help="look up mangapill ids")
    search.add_argument("query")

    return parser


async def _search(cfg: Config, query: str):
    async with SourceClient(cfg) as source:
        results = await source.search(query)

    if not results:
        print(Colors.warning(f"Nothing found for '{query}'"))
    for i, result in enumerate(results, start=1):
        print(f"{i:2} {result.id:>8}  {result.name}")


async def run(cfg: Config, args: argparse.Namespace):
    mirror = TitleMirror(cfg)

    if args.command == "add":
        await mirror.add(TitleIds(mal_id=args.mal_id, source_id=args.source_id))
    elif args.command == "fetch":
        await mirror.refresh_all()
    elif args.command == "search":
        await _search(cfg, args.query)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = Config(
            base_dir=args.dir,
            worker_count=args.workers,
            request_delay=args.delay,
            show_progress=not args.no_progress,
            recover_orphans=getattr(args, "recover_orphans", False),
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        asyncio.run(run(cfg, args))
    except MirrorError as e:
        print(Colors.error(str(e)))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
