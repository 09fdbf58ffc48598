from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path

from stickervillage.engine.autoplay import AutoplaySpec, take_day
from stickervillage.engine.serialize import snapshot
from stickervillage.engine.village import new_village
from stickervillage.paths import get_paths
from stickervillage.services.content import ContentError, ContentService
from stickervillage.services.storage import JsonFileStore
from stickervillage.services.telemetry import TelemetryService

logger = logging.getLogger("stickervillage")


def _cmd_validate(content: ContentService) -> int:
    try:
        content.validate_all()
    except ContentError as e:
        print(e, file=sys.stderr)
        return 1
    print("content OK")
    return 0


def _cmd_simulate(content: ContentService, args: argparse.Namespace, userdata: Path) -> int:
    try:
        bundle = content.load_bundle(args.level)
    except ContentError as e:
        print(e, file=sys.stderr)
        return 1

    telemetry = TelemetryService(userdata / "telemetry.jsonl")
    store = JsonFileStore(userdata)
    village = new_village(
        bundle.cards,
        bundle.stickers,
        bundle.buildings,
        bundle.recruit_cards,
        bundle.config,
        rng=random.Random(args.seed),
        tracker=telemetry,
    )
    spec = AutoplaySpec(adventurous=not args.cautious)

    for _ in range(args.days):
        if village.is_over():
            break
        report = take_day(village, spec)
        built = ", ".join(report.constructed) or "-"
        recruited = ", ".join(report.recruited) or "-"
        print(f"day {report.day:>3}: built {built}; recruited {recruited}; invasion at {village.invasion.distance}")

    store.save(f"snapshot_{bundle.config.level_id}", snapshot(village))
    logger.info("saved snapshot for %s to %s", bundle.config.level_id, userdata)
    best_key = f"best_day_{bundle.config.level_id}"
    best = store.load(best_key, 0)
    if not isinstance(best, int) or village.day > best:
        store.save(best_key, village.day)

    outcome = "overrun" if village.is_over() else "holding"
    print(f"{bundle.config.level_id}: day {village.day}, village {outcome}, built {village.board.constructed_buildings()}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="stickervillage")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--userdata", type=Path, default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("validate", help="schema-check and parse every content file")

    sim = sub.add_parser("simulate", help="autoplay a level headlessly")
    sim.add_argument("--level", default="default")
    sim.add_argument("--days", type=int, default=10)
    sim.add_argument("--seed", type=int, default=None)
    sim.add_argument("--cautious", action="store_true", help="never visit the tavern")

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    paths = get_paths(args.userdata)
    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    if args.command == "validate":
        return _cmd_validate(content)
    return _cmd_simulate(content, args, paths.userdata_dir)


if __name__ == "__main__":
    raise SystemExit(main())
