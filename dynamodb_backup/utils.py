"""
DynamoDB Backup Utilities

Record-level helpers used while writing a table archive:

- AttributeValue re-keying for AWS Data Pipeline imports
- JSON line serialization (including binary values)
- Object key and timestamp helpers
"""

import base64
import json
import logging
import posixpath
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple, Union

from .exceptions import SerializationError, UnknownTypeTagError

logger = logging.getLogger(__name__)


# =============================================================================
# AWS Data Pipeline Format
# =============================================================================

# Data Pipeline expects lower-cased type keys, and sets spelled with a
# lower-case first letter followed by 'S'.
DATA_PIPELINE_KEYS: Dict[str, str] = {
    'S': 's',
    'N': 'n',
    'B': 'b',
    'M': 'm',
    'L': 'l',
    'NULL': 'null',
    'BOOL': 'bOOL',
    'SS': 'sS',
    'NS': 'nS',
    'BS': 'bS',
}


def get_data_pipeline_key(tag: str) -> str:
    """Return the Data Pipeline spelling of an AttributeValue type tag.

    Raises:
        UnknownTypeTagError: If tag is not a DynamoDB AttributeValue type
    """
    try:
        return DATA_PIPELINE_KEYS[tag]
    except KeyError:
        raise UnknownTypeTagError(tag) from None


def to_data_pipeline_format(item: Dict[str, Any]) -> Dict[str, Any]:
    """Re-key every AttributeValue of an item, at every nesting level.

    Returns a new item; the input is left untouched. Attribute order is
    preserved. Maps and lists are walked with an explicit stack, so depth is
    bounded by memory rather than the interpreter's recursion limit
    (DynamoDB itself allows at most 32 levels).

    Example:
        >>> to_data_pipeline_format({'meta': {'M': {'flag': {'BOOL': True}}}})
        {'meta': {'m': {'flag': {'bOOL': True}}}}

    Raises:
        UnknownTypeTagError: On any tag outside DATA_PIPELINE_KEYS. The
            caller is expected to abort the table rather than skip the record.
    """
    result: Dict[str, Any] = {}
    pending: List[Tuple[Any, Union[Dict[str, Any], List[Any]]]] = [(iter(item.items()), result)]

    while pending:
        entries, target = pending[-1]
        entry = next(entries, None)
        if entry is None:
            pending.pop()
            continue

        name, attribute_value = entry
        converted: Dict[str, Any] = {}
        for tag, value in attribute_value.items():
            key = get_data_pipeline_key(tag)
            if tag == 'M':
                children: Union[Dict[str, Any], List[Any]] = {}
                pending.append((iter(value.items()), children))
                value = children
            elif tag == 'L':
                children = []
                pending.append((enumerate(value), children))
                value = children
            converted[key] = value

        if isinstance(target, list):
            target.append(converted)
        else:
            target[name] = converted

    return result


# =============================================================================
# Serialization
# =============================================================================

def _encode_binary(value: Any, base64_binary: bool) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if base64_binary:
            return base64.b64encode(raw).decode('ascii')
        return list(raw)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_item(item: Dict[str, Any], base64_binary: bool = False) -> str:
    """Serialize one item to a single JSON line (without the trailing newline).

    Binary values (B, and each member of BS) arrive from boto3 as bytes.
    With base64_binary they are written as base64 text, otherwise as a list
    of byte values.

    Raises:
        SerializationError: If the item holds a value JSON cannot represent
    """
    try:
        return json.dumps(
            item,
            default=lambda value: _encode_binary(value, base64_binary),
            separators=(',', ':'),
            ensure_ascii=False
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Failed to serialize item: {e}", e) from e


# =============================================================================
# Paths and Time
# =============================================================================

def build_object_key(backup_path: str, table_name: str) -> str:
    """Object key of a table archive: <backup_path>/<table_name>.json."""
    return posixpath.join(backup_path, f"{table_name}.json")


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)
