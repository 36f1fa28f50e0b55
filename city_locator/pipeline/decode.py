"""Delimited text decoding into raw field mappings."""

from __future__ import annotations

from typing import Iterable

from city_locator.common.errors import MalformedInputError

RawRecord = dict[str, str]


def _split_fields(line: str, separator: str) -> list[str]:
    return [field.replace('"', "").strip() for field in line.split(separator)]


def decode_rows(lines: Iterable[str], separator: str = ",") -> list[RawRecord]:
    """Decode header plus data lines into one mapping per data row.

    Values stay strings. Rows shorter than the header are padded with empty
    strings, longer rows lose their trailing extras.
    """
    if not separator:
        raise ValueError("separator must be a non-empty string")

    header: list[str] | None = None
    records: list[RawRecord] = []
    for line in lines:
        if not line.strip():
            continue
        values = _split_fields(line, separator)
        if header is None:
            header = values
            continue
        records.append({key: values[idx] if idx < len(values) else "" for idx, key in enumerate(header)})

    if header is None:
        raise MalformedInputError("Dataset is empty: no header line to derive field names from")
    return records


def decode_header(lines: Iterable[str], separator: str = ",") -> list[str]:
    for line in lines:
        if line.strip():
            return _split_fields(line, separator)
    raise MalformedInputError("Dataset is empty: no header line to derive field names from")
