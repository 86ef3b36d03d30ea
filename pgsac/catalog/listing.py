"""Parsing of psql's unaligned, tuples-only listing output.

The same listing comes in several shapes: the basic meta-commands
(`\\dt`) print four fields per row, the verbose ones (`\\dt+`) print six
or more depending on the server version, and listings run as plain
queries use control-character separators. A ListingFormat pins down the
shape the caller asked psql for.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

UNIT_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e"


@dataclass(frozen=True)
class ListingFormat:
    """Shape of one listing variant.

    Attributes:
        name: Variant name for log messages
        separator: Field separator psql is told to print
        expected_fields: Minimum fields a usable row has
        schema_column: Position of the owning namespace
        name_column: Position of the object name
        record_separator: Record separator psql is told to print
    """

    name: str
    separator: str
    expected_fields: int
    schema_column: int = 0
    name_column: int = 1
    record_separator: str = "\n"

    def __post_init__(self):
        required = max(self.schema_column, self.name_column) + 1
        if self.expected_fields < required:
            raise ValueError(
                f"Listing format {self.name} needs at least {required} fields, "
                f"got {self.expected_fields}"
            )


# \dt, \dv, \dm: Schema | Name | Type | Owner
RELATION_BASIC = ListingFormat(name="basic", separator="|", expected_fields=4)

# \dt+, \dv+, \dm+: Schema | Name | Type | Owner | [Persistence | Access method |] Size | Description
RELATION_EXTENDED = ListingFormat(name="extended", separator="|", expected_fields=6)

# routine listing query: schema | name | signature | arg_types
ROUTINE = ListingFormat(
    name="routine",
    separator=UNIT_SEPARATOR,
    expected_fields=4,
    record_separator=RECORD_SEPARATOR,
)


@dataclass
class ParsedListing:
    """Rows of a listing plus the number of rows that were unusable."""

    rows: list[list[str]] = field(default_factory=list)
    skipped: int = 0


def parse_listing(output: str, fmt: ListingFormat) -> ParsedListing:
    """Split psql output into rows of fields.

    Blank records (trailing newlines) are ignored. Records with fewer
    fields than `fmt.expected_fields` are skipped and counted; extra
    fields are tolerated so newer servers that add columns still parse.

    Args:
        output: psql stdout
        fmt: Format psql was invoked with

    Returns:
        ParsedListing with usable rows and the skip count
    """
    parsed = ParsedListing()
    text = output.rstrip("\n")
    if not text:
        return parsed

    for record in text.split(fmt.record_separator):
        if not record.strip():
            continue
        fields = record.split(fmt.separator)
        if len(fields) < fmt.expected_fields:
            logger.debug(
                f"Skipping {fmt.name} listing row with {len(fields)} of "
                f"{fmt.expected_fields} fields: {record!r}"
            )
            parsed.skipped += 1
            continue
        parsed.rows.append(fields)
    return parsed
