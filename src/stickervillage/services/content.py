from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from stickervillage.engine.buildings import BuildingSlot, BuildingSlotLocation
from stickervillage.engine.types import (
    AddResourceEffect,
    BuildingCatalog,
    BuildingCost,
    BuildingDefinition,
    BuildingEffect,
    CardCatalog,
    CardRewardEffect,
    CardTemplate,
    IncreaseDeckLimitEffect,
    MakeRecruitableEffect,
    RecruitCardCatalog,
    RecruitCardDefinition,
    ResourceStickerEffect,
    StickerCatalog,
    StickerDefinition,
)
from stickervillage.engine.village import VillageConfig, starting_cards_from

logger = logging.getLogger(__name__)

_RESOURCE_BY_LABEL = {"Power": "power", "Construction": "construction", "Invention": "invention"}


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContentError(f"Expected int for {key}")
    return v


def _require_list(obj: Mapping[str, object], key: str) -> list[object]:
    v = obj.get(key)
    if not isinstance(v, list):
        raise ContentError(f"Expected list for {key}")
    return v


def _optional_str(obj: Mapping[str, object], key: str, default: str = "") -> str:
    v = obj.get(key)
    if v is None:
        return default
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _dicts(raw: list[object]) -> list[Mapping[str, object]]:
    return [item for item in raw if isinstance(item, dict)]


# -------- Buildings --------


def _parse_building_effect(raw: Mapping[str, object], building_id: str) -> BuildingEffect | None:
    t = raw.get("type")
    if t == "make_recruitable":
        recruits = [r for r in _require_list(raw, "recruits") if isinstance(r, str)]
        return MakeRecruitableEffect(type="make_recruitable", recruits=tuple(recruits))
    if t == "add_resource":
        return AddResourceEffect(
            type="add_resource",
            when=_require_str(raw, "when"),  # type: ignore[arg-type]
            resource=_require_str(raw, "resource"),  # type: ignore[arg-type]
            amount=_require_int(raw, "amount"),
        )
    if t == "increase_deck_limit":
        return IncreaseDeckLimitEffect(type="increase_deck_limit", amount=_require_int(raw, "amount"))
    logger.warning("building %s: skipping unknown effect type %r", building_id, t)
    return None


def parse_buildings(raw: object) -> BuildingCatalog:
    if not isinstance(raw, list):
        raise ContentError("buildings.json must be a list")
    buildings: dict[str, BuildingDefinition] = {}
    for item in _dicts(raw):
        bid = _require_str(item, "id")
        cost_raw = item.get("cost", {})
        construction = 0
        if isinstance(cost_raw, dict):
            construction = _require_int(cost_raw, "construction") if "construction" in cost_raw else 0
        effects: list[BuildingEffect] = []
        for eff in _dicts(item.get("effects", []) or []):  # type: ignore[arg-type]
            parsed = _parse_building_effect(eff, bid)
            if parsed is not None:
                effects.append(parsed)
        limit = item.get("limit")
        buildings[bid] = BuildingDefinition(
            id=bid,
            name=_require_str(item, "name"),
            cost=BuildingCost(construction=construction),
            effects=tuple(effects),
            limit=limit if isinstance(limit, int) and limit > 0 else None,
            description=_optional_str(item, "description"),
            image=_optional_str(item, "image"),
            constructed_from_start=bool(item.get("constructed_from_start", False)),
        )
    return BuildingCatalog(buildings=buildings)


# -------- Stickers & cards --------


def parse_stickers(raw: object) -> StickerCatalog:
    if not isinstance(raw, list):
        raise ContentError("stickers.json must be a list")
    stickers: dict[str, StickerDefinition] = {}
    for item in _dicts(raw):
        sid = _require_str(item, "id")
        effects: list[ResourceStickerEffect] = []
        for eff in _dicts(_require_list(item, "effects")):
            label = _require_str(eff, "resourceType")
            resource = _RESOURCE_BY_LABEL.get(label)
            if resource is None:
                raise ContentError(f"sticker {sid}: unknown resourceType {label}")
            effects.append(
                ResourceStickerEffect(
                    type="Resource",
                    resource=resource,  # type: ignore[arg-type]
                    value=_require_int(eff, "value"),
                )
            )
        stickers[sid] = StickerDefinition(
            id=sid,
            name=_require_str(item, "name"),
            type=_require_str(item, "type"),  # type: ignore[arg-type]
            cost=_require_int(item, "cost"),
            effects=tuple(effects),
            description=_optional_str(item, "description"),
            image=_optional_str(item, "image"),
        )
    return StickerCatalog(stickers=stickers)


def parse_cards(raw: object) -> CardCatalog:
    if not isinstance(raw, list):
        raise ContentError("cards.json must be a list")
    cards: dict[str, CardTemplate] = {}
    for item in _dicts(raw):
        cid = _require_str(item, "id")
        starting = [s for s in item.get("starting_stickers", []) or [] if isinstance(s, str)]  # type: ignore[union-attr]
        recruit_cost = item.get("recruit_cost", 0)
        cards[cid] = CardTemplate(
            id=cid,
            name=_require_str(item, "name"),
            race=_require_str(item, "race"),  # type: ignore[arg-type]
            slots=_require_int(item, "slots"),
            starting_stickers=tuple(starting),
            recruit_cost=recruit_cost if isinstance(recruit_cost, int) else 0,
            description=_optional_str(item, "description"),
            image=_optional_str(item, "image"),
        )
    return CardCatalog(cards=cards)


def _parse_card_rewards(raw: list[object]) -> tuple[CardRewardEffect, ...]:
    out: list[CardRewardEffect] = []
    for eff in _dicts(raw):
        if eff.get("type") != "Card":
            logger.warning("skipping unknown adventure effect type %r", eff.get("type"))
            continue
        count = eff.get("count", 1)
        out.append(
            CardRewardEffect(
                type="Card",
                card_type=_require_str(eff, "cardType"),
                count=count if isinstance(count, int) else 1,
            )
        )
    return tuple(out)


def parse_recruit_cards(raw: object) -> RecruitCardCatalog:
    if not isinstance(raw, list):
        raise ContentError("recruit_cards.json must be a list")
    out: dict[str, RecruitCardDefinition] = {}
    for item in _dicts(raw):
        rid = _require_str(item, "id")
        out[rid] = RecruitCardDefinition(
            id=rid,
            name=_require_str(item, "name"),
            cost=_require_int(item, "cost"),
            success_effects=_parse_card_rewards(_require_list(item, "success_effects")),
            failure_effects=_parse_card_rewards(item.get("failure_effects", []) or []),  # type: ignore[arg-type]
            level=_optional_str(item, "level", "recruitment"),  # type: ignore[arg-type]
            description=_optional_str(item, "description"),
            image=_optional_str(item, "image"),
        )
    return RecruitCardCatalog(recruit_cards=out)


# -------- Game config --------


def resolve_config(game: Mapping[str, object], levels: list[object], level_id: str) -> VillageConfig:
    """Merges the named level over the base game settings."""
    merged: dict[str, object] = dict(game)
    if level_id != "default":
        level = next((lv for lv in _dicts(levels) if lv.get("id") == level_id), None)
        if level is None:
            raise ContentError(f"Unknown level: {level_id}")
        merged.update({k: v for k, v in level.items() if k != "id"})

    starting_raw = merged.get("starting_cards", [])
    starting = starting_cards_from(_dicts(starting_raw) if isinstance(starting_raw, list) else [])  # type: ignore[arg-type]
    slots_raw = merged.get("building_slots", [])
    locs_raw = merged.get("building_slot_locations", [])
    return VillageConfig(
        level_id=level_id,
        player_hand_size=_require_int(merged, "player_hand_size"),
        deck_limit=_require_int(merged, "deck_limit"),
        invasion_distance=_require_int(merged, "invasion_distance"),
        invasion_speed_per_turn=_require_int(merged, "invasion_speed_per_turn"),
        invasion_difficulty=_require_int(merged, "invasion_difficulty") if "invasion_difficulty" in merged else 0,
        starting_cards=starting,
        building_slots=tuple(
            BuildingSlot.from_dict(s) for s in (_dicts(slots_raw) if isinstance(slots_raw, list) else [])
        ),
        building_slot_locations=tuple(
            BuildingSlotLocation.from_dict(loc) for loc in (_dicts(locs_raw) if isinstance(locs_raw, list) else [])
        ),
    )


@dataclass(frozen=True)
class ContentBundle:
    cards: CardCatalog
    stickers: StickerCatalog
    buildings: BuildingCatalog
    recruit_cards: RecruitCardCatalog
    config: VillageConfig


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def _load_validated(self, name: str) -> object:
        path = self._data_dir / f"{name}.json"
        raw = _load_json(path)
        schema = _load_json(self._schema_dir / f"{name}.schema.json")
        validate_json(raw, schema, context=str(path))
        return raw

    def load_buildings(self) -> BuildingCatalog:
        return parse_buildings(self._load_validated("buildings"))

    def load_stickers(self) -> StickerCatalog:
        return parse_stickers(self._load_validated("stickers"))

    def load_cards(self) -> CardCatalog:
        return parse_cards(self._load_validated("cards"))

    def load_recruit_cards(self) -> RecruitCardCatalog:
        return parse_recruit_cards(self._load_validated("recruit_cards"))

    def level_ids(self) -> list[str]:
        levels = self._load_validated("levels")
        if not isinstance(levels, list):
            raise ContentError("levels.json must be a list")
        return [_require_str(lv, "id") for lv in _dicts(levels)]

    def load_config(self, level_id: str = "default") -> VillageConfig:
        game = self._load_validated("game")
        levels = self._load_validated("levels")
        if not isinstance(game, dict):
            raise ContentError("game.json must be an object")
        if not isinstance(levels, list):
            raise ContentError("levels.json must be a list")
        return resolve_config(game, levels, level_id)

    def load_bundle(self, level_id: str = "default") -> ContentBundle:
        bundle = ContentBundle(
            cards=self.load_cards(),
            stickers=self.load_stickers(),
            buildings=self.load_buildings(),
            recruit_cards=self.load_recruit_cards(),
            config=self.load_config(level_id),
        )
        self._check_references(bundle)
        logger.info(
            "loaded level %s: %d cards, %d stickers, %d buildings, %d adventures",
            level_id,
            len(bundle.cards.cards),
            len(bundle.stickers.stickers),
            len(bundle.buildings.buildings),
            len(bundle.recruit_cards.recruit_cards),
        )
        return bundle

    @staticmethod
    def _check_references(bundle: ContentBundle) -> None:
        problems: list[str] = []
        for template in bundle.cards.cards.values():
            for sid in template.starting_stickers:
                if bundle.stickers.get(sid) is None:
                    problems.append(f"card {template.id}: unknown sticker {sid}")
        for template_id, _ in bundle.config.starting_cards:
            if bundle.cards.get(template_id) is None:
                problems.append(f"starting_cards: unknown card {template_id}")
        for slot in bundle.config.building_slots:
            for bid in [*slot.available_for_construction, *([slot.already_constructed] if slot.already_constructed else [])]:
                if bundle.buildings.get(bid) is None:
                    problems.append(f"slot {slot.unique_id}: unknown building {bid}")
        for building in bundle.buildings.buildings.values():
            for eff in building.effects:
                if isinstance(eff, MakeRecruitableEffect):
                    for template_id in eff.recruits:
                        if bundle.cards.get(template_id) is None:
                            problems.append(f"building {building.id}: unknown recruit {template_id}")
        for option in bundle.recruit_cards.all():
            for eff in (*option.success_effects, *option.failure_effects):
                if bundle.cards.get(eff.card_type) is None:
                    problems.append(f"adventure {option.id}: unknown card {eff.card_type}")
        if problems:
            raise ContentError("Broken content references:\n" + "\n".join(f"- {p}" for p in problems[:10]))

    def validate_all(self) -> None:
        # Load is validation (schema + parse + references)
        for level_id in ["default", *self.level_ids()]:
            _ = self.load_bundle(level_id)
