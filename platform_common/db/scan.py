"""Map result rows onto Python destinations.

A row is any mapping-like record exposing items() (asyncpg.Record, dict).
Supported destinations:

    dict                  - {column: value}
    tuple                 - values in column order
    pydantic BaseModel    - model_validate() over the columns
    dataclass             - keyword construction, columns matched by name
    NamedTuple            - keyword construction, columns matched by name
    anything else         - single-column rows only; the value converted by dest(value)

Columns with no matching field, missing required fields, wrong column counts
and duplicate column names raise DecodeError. Only tuple accepts duplicate
names (SELECT u.id, o.id ...).
"""

import dataclasses
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from platform_common.db.errors import DecodeError, NotFoundError

T = TypeVar("T")


def _columns(record: Any) -> List[Tuple[str, Any]]:
    try:
        return list(record.items())
    except AttributeError as e:
        raise DecodeError(f"cannot decode row of type {type(record).__name__}") from e


def _by_name(dest: type, columns: List[Tuple[str, Any]]) -> Dict[str, Any]:
    named: Dict[str, Any] = {}
    for name, value in columns:
        if name in named:
            raise DecodeError(f"column: '{name}': duplicate column name in row for {dest.__name__}")
        named[name] = value
    return named


def _decode_fields(dest: type, columns: Dict[str, Any], field_names: Sequence[str], required: Iterable[str]) -> Any:
    known = set(field_names)
    for column in columns:
        if column not in known:
            raise DecodeError(
                f"column: '{column}': no corresponding field found in {dest.__name__}"
            )
    missing = [name for name in required if name not in columns]
    if missing:
        raise DecodeError(f"{dest.__name__}: missing columns for fields: {', '.join(missing)}")
    try:
        return dest(**columns)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"{dest.__name__}: {e}") from e


def decode_row(dest: Type[T], record: Any) -> T:
    """Decode one row into an instance of dest."""
    columns = _columns(record)

    if dest is tuple:
        return tuple(value for _, value in columns)  # type: ignore[return-value]
    if dest is dict:
        return _by_name(dest, columns)  # type: ignore[return-value]

    if isinstance(dest, type) and issubclass(dest, BaseModel):
        try:
            return dest.model_validate(_by_name(dest, columns))
        except ValidationError as e:
            raise DecodeError(f"{dest.__name__}: {e}") from e

    if dataclasses.is_dataclass(dest) and isinstance(dest, type):
        init_fields = [f for f in dataclasses.fields(dest) if f.init]
        required = [
            f.name for f in init_fields
            if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
        ]
        return _decode_fields(dest, _by_name(dest, columns), [f.name for f in init_fields], required)

    if isinstance(dest, type) and issubclass(dest, tuple) and hasattr(dest, "_fields"):
        defaults = getattr(dest, "_field_defaults", {})
        required = [name for name in dest._fields if name not in defaults]
        return _decode_fields(dest, _by_name(dest, columns), dest._fields, required)

    if len(columns) != 1:
        raise DecodeError(
            f"expected 1 column to decode into {getattr(dest, '__name__', dest)}, got: {len(columns)}"
        )
    value = columns[0][1]
    if value is None or (isinstance(dest, type) and isinstance(value, dest)):
        return value
    try:
        return dest(value)  # type: ignore[call-arg]
    except (TypeError, ValueError) as e:
        raise DecodeError(f"cannot convert {value!r} to {getattr(dest, '__name__', dest)}: {e}") from e


def decode_one(dest: Type[T], records: Sequence[Any]) -> T:
    """Decode exactly one row.

    Raises:
        NotFoundError: No rows
        DecodeError: More than one row, or the row does not fit dest
    """
    if not records:
        raise NotFoundError()
    if len(records) > 1:
        raise DecodeError(f"expected 1 row, got: {len(records)}")
    return decode_row(dest, records[0])


def decode_all(dest: Type[T], records: Iterable[Any]) -> List[T]:
    """Decode every row. No rows gives an empty list."""
    return [decode_row(dest, record) for record in records]


__all__ = [
    "decode_row",
    "decode_one",
    "decode_all",
]
