"""Client-side DDL assembly.

Builds CREATE statements from catalog rows returned by the queries in
`pgsac.catalog.queries`. Rows are plain mappings so that every backend
can feed them, whether values arrive typed (SQL backend) or as text
(psql backend, where NULL is an empty string and booleans are 't'/'f').
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Sequence

Row = Mapping[str, Any]

# Reserved keywords that must always be quoted as identifiers
RESERVED_KEYWORDS = frozenset(
    """
    all analyse analyze and any array as asc asymmetric authorization binary both case cast
    check collate collation column concurrently constraint create cross current_catalog
    current_date current_role current_schema current_time current_timestamp current_user
    default deferrable desc distinct do else end except false fetch for foreign freeze from
    full grant group having ilike in initially inner intersect into is isnull join lateral
    leading left like limit localtime localtimestamp natural not notnull null offset on only
    or order outer overlaps placing primary references returning right select session_user
    similar some symmetric system_user table tablesample then to trailing true union unique
    user using variadic verbose when where window with
    """.split()
)

_PLAIN_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_$]*$")

_PARALLEL = {"s": "SAFE", "r": "RESTRICTED"}


def quote_ident(name: str) -> str:
    """Quote an identifier only when PostgreSQL requires it.

    Examples:
        >>> quote_ident("users")
        'users'
        >>> quote_ident("Users")
        '"Users"'
        >>> quote_ident("order")
        '"order"'
    """
    if _PLAIN_IDENTIFIER.match(name) and name not in RESERVED_KEYWORDS:
        return name
    return '"' + name.replace('"', '""') + '"'


def qualified_name(schema: str, name: str) -> str:
    return f"{quote_ident(schema)}.{quote_ident(name)}"


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _text(value: Any) -> Optional[str]:
    """Normalize a catalog value: empty strings become None."""
    if value is None:
        return None
    value = str(value)
    return value if value != "" else None


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("t", "true", "1")


def _strip_terminator(sql: str) -> str:
    sql = sql.strip()
    while sql.endswith(";"):
        sql = sql[:-1].rstrip()
    return sql


def _column_definition(row: Row) -> str:
    parts = [quote_ident(row["column_name"]), row["data_type"]]

    collation = _text(row.get("collation"))
    if collation:
        parts.append(f"COLLATE {collation}")

    identity = _text(row.get("identity"))
    generated = _text(row.get("generated"))
    default_expr = _text(row.get("default_expr"))

    if identity == "a":
        parts.append("GENERATED ALWAYS AS IDENTITY")
    elif identity == "d":
        parts.append("GENERATED BY DEFAULT AS IDENTITY")
    elif generated == "s" and default_expr:
        parts.append(f"GENERATED ALWAYS AS ({default_expr}) STORED")
    elif default_expr:
        parts.append(f"DEFAULT {default_expr}")

    if _flag(row.get("not_null")):
        parts.append("NOT NULL")
    return " ".join(parts)


def _with_options(options: Any, prefix: str) -> str:
    options = _text(options)
    return f"{prefix}WITH ({options})" if options else ""


def _index_statements(indexes: Sequence[Row]) -> list[str]:
    return [f"{_strip_terminator(row['index_def'])};" for row in indexes]


def build_table(
    schema: str,
    name: str,
    info: Row,
    columns: Sequence[Row],
    constraints: Sequence[Row],
    indexes: Sequence[Row],
) -> str:
    """Assemble CREATE TABLE plus standalone CREATE INDEX statements.

    Args:
        schema: Table schema
        name: Table name
        info: Row of TABLE_INFO
        columns: Rows of TABLE_COLUMNS, in attribute order
        constraints: Rows of TABLE_CONSTRAINTS
        indexes: Rows of RELATION_INDEXES

    Returns:
        DDL text; statements after the first are terminated with ';'
    """
    unlogged = "UNLOGGED " if _text(info.get("persistence")) == "u" else ""
    header = f"CREATE {unlogged}TABLE {qualified_name(schema, name)}"

    elements = []
    partition_parent = _text(info.get("partition_parent"))
    if partition_parent is None:
        elements.extend(_column_definition(row) for row in columns)
    for row in constraints:
        elements.append(
            f"CONSTRAINT {quote_ident(row['constraint_name'])} {row['constraint_def']}"
        )

    if partition_parent is not None:
        statement = f"{header} PARTITION OF {partition_parent}"
        if elements:
            statement += " (\n    " + ",\n    ".join(elements) + "\n)"
        statement += f"\n{_text(info.get('partition_bound')) or 'DEFAULT'}"
    else:
        body = ",\n    ".join(elements)
        statement = f"{header} (\n    {body}\n)" if body else f"{header} (\n)"

    inherits = _text(info.get("inherits"))
    if inherits and partition_parent is None:
        statement += f"\nINHERITS ({inherits})"

    partition_key = _text(info.get("partition_key"))
    if partition_key:
        statement += f"\nPARTITION BY {partition_key}"

    statement += _with_options(info.get("options"), "\n")

    statements = [statement]
    if indexes:
        statements[0] += ";"
        statements.extend(_index_statements(indexes))
    return "\n\n".join(statements)


def build_view(
    schema: str,
    name: str,
    query: str,
    options: Optional[str] = None,
    check_option: Optional[str] = None,
) -> str:
    """Assemble CREATE OR REPLACE VIEW from a stored query.

    Args:
        schema: View schema
        name: View name
        query: Stored query
        options: Comma-separated view options without the check option
        check_option: LOCAL or CASCADED
    """
    statement = (
        f"CREATE OR REPLACE VIEW {qualified_name(schema, name)}"
        f"{_with_options(options, ' ')} AS\n{_strip_terminator(query)}"
    )
    check_option = _text(check_option)
    if check_option:
        statement += f"\n  WITH {check_option.upper()} CHECK OPTION"
    return statement


def build_materialized_view(
    schema: str,
    name: str,
    query: str,
    indexes: Sequence[Row],
    options: Optional[str] = None,
) -> str:
    """Assemble CREATE MATERIALIZED VIEW plus its indexes."""
    statement = (
        f"CREATE MATERIALIZED VIEW {qualified_name(schema, name)}"
        f"{_with_options(options, ' ')} AS\n{_strip_terminator(query)}"
    )
    if not indexes:
        return statement
    return "\n\n".join([statement + ";"] + _index_statements(indexes))


def build_aggregate(schema: str, name: str, row: Row) -> str:
    """Assemble CREATE AGGREGATE from a row of AGGREGATE_DEFINITION."""
    arguments = _text(row.get("arguments")) or "*"

    options = [
        f"SFUNC = {row['sfunc']}",
        f"STYPE = {row['stype']}",
    ]

    sspace = _text(row.get("sspace"))
    if sspace and int(sspace) > 0:
        options.append(f"SSPACE = {int(sspace)}")

    finalfunc = _text(row.get("finalfunc"))
    if finalfunc:
        options.append(f"FINALFUNC = {finalfunc}")
        if _flag(row.get("finalfunc_extra")):
            options.append("FINALFUNC_EXTRA")

    for key in ("combinefunc", "serialfunc", "deserialfunc"):
        value = _text(row.get(key))
        if value:
            options.append(f"{key.upper()} = {value}")

    # psql prints NULL and '' alike, so an empty initial value is dropped
    initcond = _text(row.get("initcond"))
    if initcond is not None:
        options.append(f"INITCOND = {quote_literal(initcond)}")

    sortop = _text(row.get("sortop"))
    if sortop:
        options.append(f"SORTOP = {sortop}")

    parallel = _PARALLEL.get(_text(row.get("parallel")) or "")
    if parallel:
        options.append(f"PARALLEL = {parallel}")

    if _text(row.get("kind")) == "h":
        options.append("HYPOTHETICAL")

    body = ",\n    ".join(options)
    return f"CREATE AGGREGATE {qualified_name(schema, name)}({arguments}) (\n    {body}\n)"
