from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from spektrum.engine.conditions import parse_conditions, parse_skill_effects
from spektrum.engine.types import ActionCard, AvatarCard, Card, CardDatabase, Element, Skill


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
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _optional_str(obj: Mapping[str, object], key: str) -> str | None:
    v = obj.get(key)
    if v is None:
        return None
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _parse_cost(raw: object) -> tuple[Element, ...]:
    if not isinstance(raw, list):
        raise ContentError("energy_cost must be a list")
    # trust schema for allowed values
    return tuple(e for e in raw if isinstance(e, str))  # type: ignore[misc]


def _parse_skill(raw: object) -> Skill:
    if not isinstance(raw, dict):
        raise ContentError("skill must be an object")
    effect = _optional_str(raw, "effect")
    return Skill(
        name=_require_str(raw, "name"),
        energy_cost=_parse_cost(raw.get("energy_cost")),
        damage=_require_int(raw, "damage"),
        effect=effect,
        conditions=parse_conditions(effect),
        effects=parse_skill_effects(effect),
    )


def _parse_card(item: Mapping[str, object]) -> Card:
    card_id = _require_str(item, "id")
    name = _require_str(item, "name")
    category = _require_str(item, "category")
    element = _require_str(item, "element")
    rarity = _optional_str(item, "rarity") or "common"

    if category == "avatar":
        raw_skill2 = item.get("skill2")
        return AvatarCard(
            id=card_id,
            name=name,
            element=element,  # type: ignore[arg-type]
            level=_require_int(item, "level"),  # type: ignore[arg-type]
            subtype=_require_str(item, "subtype"),  # type: ignore[arg-type]
            health=_require_int(item, "health"),
            skill1=_parse_skill(item.get("skill1")),
            skill2=_parse_skill(raw_skill2) if raw_skill2 is not None else None,
            base_type=_optional_str(item, "base_type"),  # type: ignore[arg-type]
            rarity=rarity,  # type: ignore[arg-type]
        )

    effect = _require_str(item, "effect")
    return ActionCard(
        id=card_id,
        name=name,
        category=category,  # type: ignore[arg-type]
        element=element,  # type: ignore[arg-type]
        energy_cost=_parse_cost(item.get("energy_cost")),
        effect=effect,
        conditions=parse_conditions(effect),
        rarity=rarity,  # type: ignore[arg-type]
    )


@dataclass(frozen=True)
class DeckList:
    id: str
    name: str
    counts: tuple[tuple[str, int], ...]

    def card_ids(self) -> list[str]:
        """Expand into the ordered list `new_match` consumes."""
        out: list[str] = []
        for card_id, count in self.counts:
            out.extend([card_id] * count)
        return out

    @property
    def size(self) -> int:
        return sum(c for _, c in self.counts)


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def _load_validated(self, filename: str, schema_name: str) -> dict[str, object]:
        path = self._data_dir / filename
        raw = _load_json(path)
        schema = _load_json(self._schema_dir / schema_name)
        validate_json(raw, schema, context=str(path))
        if not isinstance(raw, dict):
            raise ContentError(f"{filename} must be an object")
        return raw

    def load_cards_db(self) -> CardDatabase:
        raw = self._load_validated("cards.json", "cards.schema.json")
        raw_cards = raw.get("cards")
        if not isinstance(raw_cards, list):
            raise ContentError("cards.json.cards must be a list")

        cards: dict[str, Card] = {}
        for item in raw_cards:
            if not isinstance(item, dict):
                continue
            card = _parse_card(item)
            if card.id in cards:
                raise ContentError(f"Duplicate card id: {card.id}")
            cards[card.id] = card

        # Evolution targets must exist in the catalog
        subtypes = {c.subtype for c in cards.values() if isinstance(c, AvatarCard) and c.level == 1}
        for c in cards.values():
            if isinstance(c, AvatarCard) and c.level == 2 and c.base_type is not None and c.base_type not in subtypes:
                raise ContentError(f"{c.id}: no level 1 avatar with subtype {c.base_type}")
        return CardDatabase(cards=cards)

    def load_decks(self, cards: CardDatabase | None = None) -> dict[str, DeckList]:
        raw = self._load_validated("decks.json", "decks.schema.json")
        raw_decks = raw.get("decks")
        if not isinstance(raw_decks, list):
            raise ContentError("decks.json.decks must be a list")

        decks: dict[str, DeckList] = {}
        for d in raw_decks:
            if not isinstance(d, dict):
                continue
            counts: list[tuple[str, int]] = []
            for entry in d.get("cards", []):
                if isinstance(entry, dict):
                    counts.append((_require_str(entry, "id"), _require_int(entry, "count")))
            deck = DeckList(id=_require_str(d, "id"), name=_require_str(d, "name"), counts=tuple(counts))
            if cards is not None:
                unknown = sorted({cid for cid, _ in deck.counts if cid not in cards.cards})
                if unknown:
                    raise ContentError(f"Deck {deck.id} references unknown cards: {', '.join(unknown)}")
            decks[deck.id] = deck
        return decks

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        cards = self.load_cards_db()
        _ = self.load_decks(cards)
