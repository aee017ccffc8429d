"""
Catalog record parser.

Converts raw catalog records (as exported by the card database) into
typed Card variants. Records use the catalog's camelCase export shape:

    {
        "id": "swsh1-25",
        "name": "Charizard V",
        "supertype": "Pokémon",
        "subtypes": ["Basic", "V"],
        "types": ["Fire"],
        "hp": "220",
        "attacks": [{"name": "Claw Slash", "cost": ["Fire", "Fire"], "damage": "130"}],
        "abilities": [{"name": "...", "text": "..."}],
        "rarity": "Rare Holo V",
        "text": "...",
        "legalities": {"standard": "Legal", "expanded": "Legal"},
        "releaseDate": "2020/02/07",
        "price": 12.5,
        "trend": "rising"
    }

Malformed creature data (missing hp, unparseable damage, no attacks)
degrades to zero values rather than failing the whole record.
"""

import json
import re
from pathlib import Path
from typing import Any

from deckforge.models.card import CARD_TYPES, Attack, Card, CardRole, CreatureCard

# Catalog supertypes and role names -> role
ROLE_ALIASES: dict[str, CardRole] = {
    "pokémon": CardRole.CREATURE,
    "pokemon": CardRole.CREATURE,
    "creature": CardRole.CREATURE,
    "trainer": CardRole.SUPPORT,
    "support": CardRole.SUPPORT,
    "energy": CardRole.RESOURCE,
    "resource": CardRole.RESOURCE,
}

_DIGITS = re.compile(r"\D")


def parse_int(value: Any) -> int:
    """
    Parse an integer from catalog text such as "120+" or "30×".

    Returns 0 for missing or digit-free values.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        return max(0, int(value))
    digits = _DIGITS.sub("", str(value))
    return int(digits) if digits else 0


def parse_role(record: dict[str, Any]) -> CardRole:
    """
    Resolve the card role from "role" or "supertype".

    Raises:
        ValueError: If neither field names a known role
    """
    raw = record.get("role") or record.get("supertype") or ""
    role = ROLE_ALIASES.get(str(raw).strip().lower())
    if role is None:
        raise ValueError(f"Unknown card role {raw!r} for card {record.get('id')!r}")
    return role


def _parse_attack(raw: Any) -> Attack | None:
    if not isinstance(raw, dict):
        return None

    if "energyCost" in raw:
        energy_cost = parse_int(raw.get("energyCost"))
    else:
        cost = raw.get("cost") or []
        energy_cost = len(cost) if isinstance(cost, list) else parse_int(cost)

    return Attack(
        name=str(raw.get("name", "")),
        energy_cost=energy_cost,
        damage=parse_int(raw.get("damage")),
    )


def _parse_abilities(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    texts: list[str] = []
    for entry in raw:
        if isinstance(entry, dict):
            text = entry.get("text") or entry.get("name") or ""
        else:
            text = str(entry)
        if text:
            texts.append(text)
    return tuple(texts)


def _parse_tags(raw: Any, field_name: str) -> frozenset[str]:
    """
    Parse a list-valued tag field. A bare string is a single tag.

    Raises:
        ValueError: If the value is neither a list nor a string
    """
    if not raw:
        return frozenset()
    if isinstance(raw, str):
        return frozenset({raw})
    if not isinstance(raw, (list, tuple)):
        raise ValueError(f"Catalog field {field_name!r} must be a list, got {type(raw).__name__}")
    return frozenset(str(tag) for tag in raw)


def _parse_legal_formats(record: dict[str, Any]) -> frozenset[str]:
    if "legalFormats" in record:
        formats = _parse_tags(record.get("legalFormats"), "legalFormats")
        return frozenset(f.lower() for f in formats)

    legalities = record.get("legalities") or {}
    if not isinstance(legalities, dict):
        return frozenset()
    return frozenset(
        fmt.lower() for fmt, status in legalities.items() if str(status).lower() == "legal"
    )


def _parse_text(record: dict[str, Any]) -> str:
    text = record.get("text")
    if isinstance(text, list):
        return " ".join(str(t) for t in text)
    if text:
        return str(text)
    rules = record.get("rules")
    if isinstance(rules, list):
        return " ".join(str(r) for r in rules)
    return ""


def parse_card(record: dict[str, Any]) -> Card:
    """
    Build a typed Card from a catalog record.

    Args:
        record: Raw catalog record

    Returns:
        CreatureCard, SupportCard or ResourceCard

    Raises:
        ValueError: If the record is not an object, has no id/name, an
            unknown role or a malformed tag field
    """
    if not isinstance(record, dict):
        raise ValueError(f"Catalog record must be an object, got {type(record).__name__}")

    card_id = record.get("id")
    name = record.get("name")
    if not card_id or not name:
        raise ValueError(f"Catalog record needs both id and name: {record!r:.120}")

    role = parse_role(record)
    common: dict[str, Any] = {
        "id": str(card_id),
        "name": str(name),
        "subtypes": _parse_tags(record.get("subtypes"), "subtypes"),
        "element_types": _parse_tags(
            record.get("types") or record.get("elementTypes"), "types"
        ),
        "abilities": _parse_abilities(record.get("abilities")),
        "rarity": str(record.get("rarity") or ""),
        "text": _parse_text(record),
        "legal_formats": _parse_legal_formats(record),
        "release_date": str(record["releaseDate"]) if record.get("releaseDate") else None,
    }

    if role is CardRole.CREATURE:
        raw_attacks = record.get("attacks")
        if not isinstance(raw_attacks, list):
            raw_attacks = []
        attacks = tuple(
            attack for attack in (_parse_attack(a) for a in raw_attacks) if attack is not None
        )
        return CreatureCard(hp=parse_int(record.get("hp")), attacks=attacks, **common)

    return CARD_TYPES[role](**common)


def parse_price(record: dict[str, Any]) -> float | None:
    """
    Extract the current market price from a record.

    Zero, negative and missing prices mean "unknown", not "free".
    """
    raw = record.get("price", record.get("marketPrice"))
    if raw is None:
        return None
    try:
        price = float(raw)
    except (TypeError, ValueError):
        return None
    return price if price > 0 else None


def load_catalog_records(path: Path) -> list[dict[str, Any]]:
    """
    Load raw catalog records from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file does not hold a JSON list
    """
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found at {path}")

    with open(path, encoding="utf-8") as f:
        records = json.load(f)

    if not isinstance(records, list):
        raise ValueError(f"Catalog file {path} must contain a JSON list of cards")

    return records
