"""Shared serialization utilities for sinks and snapshots."""

from dataclasses import asdict, fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert dataclass to dict with proper serialization."""
    result = {}
    for key, value in asdict(obj).items():
        result[key] = serialize_value(value)
    return result


def to_dict_fast(obj: Any) -> dict:
    """Convert a flat dataclass without the deep copy done by ``asdict``.

    Parameters
    ----------
    obj : Any
        A dataclass instance whose fields are not dataclasses themselves
        (``PaymentRecord``, ``DerivedComparative``).

    Returns
    -------
    dict
        Serialized dictionary.
    """
    return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output.

    Decimals become strings so cents survive the round trip.
    """
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple, frozenset, set)):
        return [serialize_value(v) for v in value]
    return value


def snapshot_to_dict(snapshot: Any) -> dict:
    """Flatten a ``Snapshot`` into its wire form."""
    return {
        "session_id": snapshot.session_id,
        "step": serialize_value(snapshot.step),
        "created_at": serialize_value(snapshot.created_at),
        "payload": serialize_value(snapshot.payload),
        "metadata": serialize_value(snapshot.metadata),
    }
