"""Catalog queries shared by all query-capable backends.

Queries use `:name` bind parameters. `columns` lists the result columns
in select order, which lets text-based backends turn positional output
back into rows.

Only documented introspection functions are used (`format_type`,
`pg_get_expr`, `pg_get_constraintdef`, `pg_get_indexdef`,
`pg_get_viewdef`, `pg_get_functiondef`, `pg_get_partkeydef`). Table DDL
is assembled client-side from their output; PostgreSQL has no
server-side CREATE TABLE reconstruction.
"""

from __future__ import annotations

from typing import NamedTuple

from pgsac.models.objects import CatalogCategory


class Query(NamedTuple):
    sql: str
    columns: tuple[str, ...]


_RELKINDS = {
    CatalogCategory.TABLE: "('r', 'p')",
    CatalogCategory.VIEW: "('v')",
    CatalogCategory.MATERIALIZED_VIEW: "('m')",
}

_PROKINDS = {
    CatalogCategory.FUNCTION: "('f', 'p', 'w')",
    CatalogCategory.AGGREGATE: "('a')",
}


def relation_listing(category: CatalogCategory) -> Query:
    """Listing of tables, views or materialized views in a schema."""
    return Query(
        sql=f"""
            SELECT n.nspname AS schema_name,
                   c.relname AS object_name
            FROM pg_catalog.pg_class c
            JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
            WHERE n.nspname = :schema
              AND c.relkind IN {_RELKINDS[category]}
            ORDER BY c.relname
        """,
        columns=("schema_name", "object_name"),
    )


def routine_listing(category: CatalogCategory) -> Query:
    """Listing of regular functions or aggregates in a schema.

    `signature` is the input argument type list accepted by regprocedure;
    `arg_types` is the oidvector of the same argument types.
    """
    return Query(
        sql=f"""
            SELECT n.nspname AS schema_name,
                   p.proname AS object_name,
                   pg_catalog.oidvectortypes(p.proargtypes) AS signature,
                   p.proargtypes::text AS arg_types
            FROM pg_catalog.pg_proc p
            JOIN pg_catalog.pg_namespace n ON n.oid = p.pronamespace
            WHERE n.nspname = :schema
              AND p.prokind IN {_PROKINDS[category]}
            ORDER BY p.proname, signature
        """,
        columns=("schema_name", "object_name", "signature", "arg_types"),
    )


TABLE_INFO = Query(
    sql="""
        SELECT c.relkind AS relkind,
               c.relpersistence AS persistence,
               CASE WHEN c.relkind = 'p'
                    THEN pg_catalog.pg_get_partkeydef(c.oid) END AS partition_key,
               (SELECT pg_catalog.quote_ident(pn.nspname) || '.' || pg_catalog.quote_ident(pc.relname)
                  FROM pg_catalog.pg_inherits i
                  JOIN pg_catalog.pg_class pc ON pc.oid = i.inhparent
                  JOIN pg_catalog.pg_namespace pn ON pn.oid = pc.relnamespace
                 WHERE i.inhrelid = c.oid
                   AND c.relispartition) AS partition_parent,
               CASE WHEN c.relispartition
                    THEN pg_catalog.pg_get_expr(c.relpartbound, c.oid) END AS partition_bound,
               (SELECT pg_catalog.string_agg(
                           pg_catalog.quote_ident(pn.nspname) || '.' || pg_catalog.quote_ident(pc.relname),
                           ', ' ORDER BY i.inhseqno)
                  FROM pg_catalog.pg_inherits i
                  JOIN pg_catalog.pg_class pc ON pc.oid = i.inhparent
                  JOIN pg_catalog.pg_namespace pn ON pn.oid = pc.relnamespace
                 WHERE i.inhrelid = c.oid
                   AND NOT c.relispartition) AS inherits,
               pg_catalog.array_to_string(c.reloptions, ', ') AS options
        FROM pg_catalog.pg_class c
        JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
        WHERE n.nspname = :schema
          AND c.relname = :name
          AND c.relkind IN ('r', 'p')
    """,
    columns=(
        "relkind",
        "persistence",
        "partition_key",
        "partition_parent",
        "partition_bound",
        "inherits",
        "options",
    ),
)

TABLE_COLUMNS = Query(
    sql="""
        SELECT a.attname AS column_name,
               pg_catalog.format_type(a.atttypid, a.atttypmod) AS data_type,
               a.attnotnull AS not_null,
               pg_catalog.pg_get_expr(d.adbin, d.adrelid) AS default_expr,
               a.attidentity AS identity,
               a.attgenerated AS generated,
               CASE WHEN a.attcollation <> t.typcollation
                    THEN pg_catalog.quote_ident(co.collname) END AS collation
        FROM pg_catalog.pg_attribute a
        JOIN pg_catalog.pg_class c ON c.oid = a.attrelid
        JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
        JOIN pg_catalog.pg_type t ON t.oid = a.atttypid
        LEFT JOIN pg_catalog.pg_attrdef d ON d.adrelid = a.attrelid AND d.adnum = a.attnum
        LEFT JOIN pg_catalog.pg_collation co ON co.oid = a.attcollation
        WHERE n.nspname = :schema
          AND c.relname = :name
          AND a.attnum > 0
          AND NOT a.attisdropped
        ORDER BY a.attnum
    """,
    columns=("column_name", "data_type", "not_null", "default_expr", "identity", "generated", "collation"),
)

TABLE_CONSTRAINTS = Query(
    sql="""
        SELECT con.conname AS constraint_name,
               pg_catalog.pg_get_constraintdef(con.oid, true) AS constraint_def
        FROM pg_catalog.pg_constraint con
        JOIN pg_catalog.pg_class c ON c.oid = con.conrelid
        JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
        WHERE n.nspname = :schema
          AND c.relname = :name
          AND con.conislocal
          AND con.contype IN ('p', 'u', 'c', 'f', 'x')
        ORDER BY CASE con.contype
                     WHEN 'p' THEN 0
                     WHEN 'u' THEN 1
                     WHEN 'c' THEN 2
                     WHEN 'f' THEN 3
                     ELSE 4
                 END,
                 con.conname
    """,
    columns=("constraint_name", "constraint_def"),
)

# Indexes not created implicitly by a constraint of the same relation
RELATION_INDEXES = Query(
    sql="""
        SELECT pg_catalog.pg_get_indexdef(i.indexrelid) AS index_def
        FROM pg_catalog.pg_index i
        JOIN pg_catalog.pg_class ic ON ic.oid = i.indexrelid
        JOIN pg_catalog.pg_class c ON c.oid = i.indrelid
        JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
        WHERE n.nspname = :schema
          AND c.relname = :name
          AND NOT ic.relispartition
          AND NOT EXISTS (
              SELECT 1
              FROM pg_catalog.pg_constraint con
              WHERE con.conrelid = i.indrelid
                AND con.conindid = i.indexrelid
                AND con.contype IN ('p', 'u', 'x')
          )
        ORDER BY ic.relname
    """,
    columns=("index_def",),
)


def view_query(category: CatalogCategory) -> Query:
    """Stored query of a view or materialized view.

    The check option is stored in `reloptions` as `check_option=...`; it
    is split out of the remaining storage options.
    """
    relkind = "'v'" if category is CatalogCategory.VIEW else "'m'"
    return Query(
        sql=f"""
            SELECT pg_catalog.pg_get_viewdef(c.oid, true) AS view_def,
                   pg_catalog.array_to_string(
                       pg_catalog.array_remove(
                           pg_catalog.array_remove(c.reloptions, 'check_option=local'),
                           'check_option=cascaded'),
                       ', ') AS options,
                   CASE WHEN 'check_option=local' = ANY (c.reloptions) THEN 'LOCAL'
                        WHEN 'check_option=cascaded' = ANY (c.reloptions) THEN 'CASCADED'
                   END AS check_option
            FROM pg_catalog.pg_class c
            JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
            WHERE n.nspname = :schema
              AND c.relname = :name
              AND c.relkind = {relkind}
        """,
        columns=("view_def", "options", "check_option"),
    )


FUNCTION_DEFINITION = Query(
    sql="""
        SELECT pg_catalog.pg_get_functiondef(p.oid) AS function_def
        FROM pg_catalog.pg_proc p
        JOIN pg_catalog.pg_namespace n ON n.oid = p.pronamespace
        WHERE n.nspname = :schema
          AND p.proname = :name
          AND p.proargtypes = CAST(:arg_types AS pg_catalog.oidvector)
          AND p.prokind <> 'a'
    """,
    columns=("function_def",),
)

# pg_get_functiondef rejects aggregates; read pg_aggregate directly
AGGREGATE_DEFINITION = Query(
    sql="""
        SELECT pg_catalog.pg_get_function_identity_arguments(p.oid) AS arguments,
               a.aggkind AS kind,
               a.aggtransfn::pg_catalog.regproc::text AS sfunc,
               pg_catalog.format_type(a.aggtranstype, NULL) AS stype,
               a.aggtransspace AS sspace,
               NULLIF(a.aggfinalfn::pg_catalog.regproc::text, '-') AS finalfunc,
               a.aggfinalextra AS finalfunc_extra,
               NULLIF(a.aggcombinefn::pg_catalog.regproc::text, '-') AS combinefunc,
               NULLIF(a.aggserialfn::pg_catalog.regproc::text, '-') AS serialfunc,
               NULLIF(a.aggdeserialfn::pg_catalog.regproc::text, '-') AS deserialfunc,
               a.agginitval AS initcond,
               (SELECT o.oprname
                  FROM pg_catalog.pg_operator o
                 WHERE o.oid = a.aggsortop) AS sortop,
               p.proparallel AS parallel
        FROM pg_catalog.pg_proc p
        JOIN pg_catalog.pg_namespace n ON n.oid = p.pronamespace
        JOIN pg_catalog.pg_aggregate a ON a.aggfnoid = p.oid
        WHERE n.nspname = :schema
          AND p.proname = :name
          AND p.proargtypes = CAST(:arg_types AS pg_catalog.oidvector)
    """,
    columns=(
        "arguments",
        "kind",
        "sfunc",
        "stype",
        "sspace",
        "finalfunc",
        "finalfunc_extra",
        "combinefunc",
        "serialfunc",
        "deserialfunc",
        "initcond",
        "sortop",
        "parallel",
    ),
)
