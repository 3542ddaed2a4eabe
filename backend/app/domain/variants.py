"""
Variant Key Codec

A variant key is the canonical string for one combination of product
options, e.g. {"Size": "M", "Color": "Red"} -> "Color:Red,Size:M".
Entries are sorted by option name so the same selection always maps to
the same key no matter how the client ordered it.

Date: 2026-10-12
"""
from itertools import product as cartesian_product
from typing import Any, Dict, List, Mapping, Optional

from app.core.exceptions import ValidationError

PAIR_SEPARATOR = ","
NAME_VALUE_SEPARATOR = ":"

VariantSchema = Mapping[str, List[Any]]


def variant_display_name(value: Any) -> str:
    """
    Option values are plain strings, or {"name": ..., "color": "#hex"} for
    color swatches. Keys always use the display name.
    """
    if isinstance(value, Mapping) and "name" in value:
        return str(value["name"])
    return str(value)


def _check_token(token: str, what: str) -> None:
    if not token:
        raise ValidationError(f"Variant {what} cannot be empty")
    if PAIR_SEPARATOR in token or NAME_VALUE_SEPARATOR in token:
        raise ValidationError(
            f"Variant {what} '{token}' cannot contain "
            f"'{PAIR_SEPARATOR}' or '{NAME_VALUE_SEPARATOR}'"
        )


def generate_variant_key(selections: Mapping[str, Any]) -> str:
    """
    Build the canonical key for a set of option selections.

    Example:
        >>> generate_variant_key({"Size": "M", "Color": "Red"})
        'Color:Red,Size:M'
    """
    pairs = []
    for name, value in sorted(selections.items(), key=lambda entry: entry[0]):
        display = variant_display_name(value)
        _check_token(name, "name")
        _check_token(display, "value")
        pairs.append(f"{name}{NAME_VALUE_SEPARATOR}{display}")
    return PAIR_SEPARATOR.join(pairs)


def parse_variant_key(key: Optional[str]) -> Dict[str, str]:
    """
    Inverse of generate_variant_key. Segments that are not exactly one
    name/value pair (no separator, an empty side, or a stray extra ':')
    are skipped, not rejected.
    """
    if not key:
        return {}

    selections = {}
    for part in key.split(PAIR_SEPARATOR):
        pieces = part.split(NAME_VALUE_SEPARATOR)
        if len(pieces) == 2 and all(pieces):
            name, value = pieces
            selections[name] = value
    return selections


def all_combinations(schema: Optional[VariantSchema]) -> List[str]:
    """Every key the schema allows, in option/value declaration order"""
    if not schema:
        return []

    names = list(schema.keys())
    value_lists = [
        [variant_display_name(value) for value in schema[name]]
        for name in names
    ]
    return [
        generate_variant_key(dict(zip(names, combination)))
        for combination in cartesian_product(*value_lists)
    ]


def _schema_violation(key: str, selections: Mapping[str, str], schema: VariantSchema) -> Optional[str]:
    if set(selections) != set(schema):
        return f"Variant '{key}' must select exactly: {', '.join(sorted(schema))}"
    for name, value in selections.items():
        if value not in {variant_display_name(v) for v in schema[name]}:
            return f"Invalid value '{value}' for variant option '{name}'"
    return None


def is_canonical_variant_key(key: str, schema: Optional[VariantSchema]) -> bool:
    """
    True when key is already the canonical form of an allowed combination.
    Checks one key against the schema without enumerating combinations.
    """
    if not schema:
        return False

    selections = parse_variant_key(key)
    if _schema_violation(key, selections, schema):
        return False

    canonical = PAIR_SEPARATOR.join(
        f"{name}{NAME_VALUE_SEPARATOR}{value}" for name, value in sorted(selections.items())
    )
    return canonical == key


def canonicalize_variant_key(key: str, schema: Optional[VariantSchema]) -> str:
    """
    Validate a client-supplied key against a product's schema and return
    the canonical form. Every option must be selected, with an allowed value.
    """
    if not schema:
        raise ValidationError("Product has no variants")

    selections = parse_variant_key(key)
    violation = _schema_violation(key, selections, schema)
    if violation:
        raise ValidationError(violation)

    return generate_variant_key(selections)
