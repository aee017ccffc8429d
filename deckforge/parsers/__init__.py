from deckforge.parsers.catalog import (
    load_catalog_records,
    parse_card,
    parse_int,
    parse_price,
    parse_role,
)

__all__ = [
    "load_catalog_records",
    "parse_card",
    "parse_int",
    "parse_price",
    "parse_role",
]
