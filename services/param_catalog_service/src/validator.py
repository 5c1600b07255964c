from typing import Dict, Any, Optional, List, Sequence
import jsonschema
import hashlib
import json

from .errors import CatalogError


class CatalogValidationError(CatalogError):
    pass


CONFIG_LS_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {"type": "string"},
}

CONFIG_HELP_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string"},
        "type": {"type": "string"},
        "level": {"type": "string"},
        "tags": {"type": ["array", "null"], "items": {"type": "string"}},
        "services": {"type": ["array", "null"], "items": {"type": "string"}},
        "can_update_at_runtime": {"type": "boolean"},
    },
}

BASELINE_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": CONFIG_HELP_SCHEMA,
}


def validate_reply_structure(reply: Any, schema: Dict[str, Any]) -> None:
    """
    Validates a decoded cluster reply or dataset against a JSON schema.
    """
    try:
        jsonschema.validate(instance=reply, schema=schema)
    except jsonschema.exceptions.ValidationError as e:
        raise CatalogValidationError(f"Structure validation failed: {e.message}")


def decode_json_reply(raw: Any, what: str) -> Any:
    """
    Decodes a JSON reply given as bytes or text.
    """
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise CatalogValidationError(f"Could not decode {what} as JSON: {e}")


def generate_catalog_checksum(records: List[Dict[str, Any]]) -> str:
    """
    Generates a checksum for a list of parameter records.
    """
    records_str = json.dumps(records, sort_keys=True)
    return hashlib.sha256(records_str.encode()).hexdigest()


def validate_sorted_unique(names: Sequence[str]) -> None:
    """
    Validates that names are strictly ascending, i.e. sorted and free of duplicates.
    """
    for previous, current in zip(names, names[1:]):
        if previous == current:
            raise CatalogValidationError(f"Duplicate parameter name '{current}'")
        if previous > current:
            raise CatalogValidationError(f"Parameter names not sorted: '{previous}' > '{current}'")


def parse_min_max(value: Any) -> Optional[float]:
    """
    Normalizes a min/max bound to a float.

    Bounds arrive as numbers, numeric strings, empty strings or not at all.
    Anything that is not a usable number becomes None instead of an error.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return float(value)
        except ValueError:
            return None
    return None
