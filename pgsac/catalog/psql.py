"""Catalog source that drives the external psql client.

Every listing or definition request is one psql invocation. Connection
parameters go on the command line except the password, which is handed
to the child process through PGPASSWORD so it never shows up in the
process list.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from typing import Any, Optional

from pgsac.catalog import queries
from pgsac.catalog.base import QueryCatalogSource
from pgsac.catalog.listing import (
    RECORD_SEPARATOR,
    RELATION_BASIC,
    RELATION_EXTENDED,
    ROUTINE,
    UNIT_SEPARATOR,
    ListingFormat,
    ParsedListing,
    parse_listing,
)
from pgsac.catalog.queries import Query
from pgsac.core.config import config
from pgsac.exceptions import CatalogError, ConnectionError
from pgsac.models.objects import CatalogCategory, CatalogEntry
from pgsac.models.project import ConnectionConfig

logger = logging.getLogger(__name__)

_LISTING_COMMANDS = {
    CatalogCategory.TABLE: "\\dt",
    CatalogCategory.VIEW: "\\dv",
    CatalogCategory.MATERIALIZED_VIEW: "\\dm",
}

# `:name` bind parameter, but not a `::type` cast
_BIND_PARAM = re.compile(r"(?<![:\w]):(\w+)")


def psql_pattern_identifier(name: str) -> str:
    """Double-quote a name for use in a psql pattern or object argument.

    Examples:
        >>> psql_pattern_identifier('app')
        '"app"'
        >>> psql_pattern_identifier('we"ird')
        '"we""ird"'
    """
    return '"' + name.replace('"', '""') + '"'


def to_psql_variables(sql: str) -> str:
    """Rewrite `:name` bind parameters into psql's quoted `:'name'` form."""
    return _BIND_PARAM.sub(r":'\1'", sql)


class PsqlCatalogSource(QueryCatalogSource):
    """Catalog source backed by psql invocations.

    Options:
        - path: psql executable (default: PGSAC_PSQL_PATH or "psql")
        - extended: Use the verbose listing meta-commands (default: False)

    Examples:
        >>> with PsqlCatalogSource(connection, {"extended": True}) as source:
        ...     views = source.list_objects("app", CatalogCategory.VIEW)
    """

    name = "psql"

    def __init__(self, connection: ConnectionConfig, options: Optional[dict[str, Any]] = None):
        super().__init__(connection, options)
        self.psql_path: str = self.options.get("path") or config.psql_path
        self.extended: bool = bool(self.options.get("extended", False))

    @property
    def relation_format(self) -> ListingFormat:
        return RELATION_EXTENDED if self.extended else RELATION_BASIC

    def connect(self) -> None:
        """Locate psql and verify the server accepts the credentials.

        Raises:
            ConnectionError: If psql is missing or the connection fails
        """
        resolved = shutil.which(self.psql_path)
        if resolved is None:
            raise ConnectionError(f"psql executable not found: {self.psql_path}")

        self.psql_path = resolved
        try:
            self._run(command="SELECT 1")
        except CatalogError as e:
            cfg = self.connection_config
            raise ConnectionError(
                f"Failed to connect to PostgreSQL at {cfg.host}:{cfg.port}/{cfg.database}: {e}"
            ) from e
        self.connection = resolved
        logger.info(f"Using {resolved} for catalog access")

    def disconnect(self) -> None:
        """Nothing is held open between invocations."""
        self.connection = None

    def test_connection(self) -> bool:
        if not self.is_connected:
            return False
        try:
            self._run(command="SELECT 1")
            return True
        except CatalogError:
            return False

    def list_objects(self, schema: str, category: CatalogCategory) -> list[CatalogEntry]:
        """List relations via meta-commands, routines via the listing query."""
        self._require_connection()
        if category.is_routine:
            query = queries.routine_listing(category)
            output = self._run(
                script=self._script(query),
                variables={"schema": schema},
                fmt=ROUTINE,
            )
            parsed = self._parse(output, ROUTINE, schema, category)
            return [
                CatalogEntry(
                    schema=row[ROUTINE.schema_column],
                    name=row[ROUTINE.name_column],
                    category=category,
                    signature=row[2],
                    arg_types=row[3],
                )
                for row in parsed.rows
            ]

        fmt = self.relation_format
        suffix = "+" if self.extended else ""
        command = f"{_LISTING_COMMANDS[category]}{suffix} {psql_pattern_identifier(schema)}.*"
        output = self._run(command=command, fmt=fmt)

        parsed = self._parse(output, fmt, schema, category)
        return [
            CatalogEntry(schema=row[fmt.schema_column], name=row[fmt.name_column], category=category)
            for row in parsed.rows
        ]

    @staticmethod
    def _script(query: Query) -> str:
        return to_psql_variables(query.sql).strip() + ";\n"

    @staticmethod
    def _parse(
        output: str, fmt: ListingFormat, schema: str, category: CatalogCategory
    ) -> ParsedListing:
        parsed = parse_listing(output, fmt)
        if parsed.skipped:
            logger.warning(
                f"Skipped {parsed.skipped} {fmt.name} listing rows with fewer than "
                f"{fmt.expected_fields} fields while listing {category.label} in {schema}"
            )
        return parsed

    def _view_definition(self, entry: CatalogEntry) -> str:
        target = f"{psql_pattern_identifier(entry.schema)}.{psql_pattern_identifier(entry.name)}"
        return self._run(command=f"\\sv {target}")

    def _function_definition(self, entry: CatalogEntry) -> str:
        target = (
            f"{psql_pattern_identifier(entry.schema)}."
            f"{psql_pattern_identifier(entry.name)}({entry.signature or ''})"
        )
        return self._run(command=f"\\sf {target}")

    def _fetch_rows(self, query: Query, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Run a catalog query through psql and map its positional output to rows."""
        output = self._run(script=self._script(query), variables=params, fmt=ROUTINE)

        # psql ends the last record with a newline instead of the record separator
        rows = []
        text = output[:-1] if output.endswith("\n") else output
        if not text:
            return rows
        for record in text.split(RECORD_SEPARATOR):
            fields = record.split(UNIT_SEPARATOR)
            if len(fields) != len(query.columns):
                raise CatalogError(
                    f"unexpected psql output: {len(fields)} fields, expected {len(query.columns)}"
                )
            rows.append(dict(zip(query.columns, fields)))
        return rows

    def _run(
        self,
        command: Optional[str] = None,
        script: Optional[str] = None,
        variables: Optional[dict[str, Any]] = None,
        fmt: ListingFormat = RELATION_BASIC,
    ) -> str:
        """Invoke psql once and return its stdout.

        Args:
            command: Single command passed with -c
            script: SQL script fed on stdin
            variables: psql variables for the script
            fmt: Listing format whose separators psql should print

        Raises:
            CatalogError: If psql cannot be started, times out or exits non-zero
        """
        cfg = self.connection_config
        args = [
            self.psql_path,
            "-X",
            "--no-password",
            "-h", cfg.host,
            "-p", str(cfg.port),
            "-U", cfg.user,
            "-d", cfg.database,
            "--no-align",
            "--tuples-only",
            "--quiet",
            f"--field-separator={fmt.separator}",
            f"--record-separator={fmt.record_separator}",
            "-v", "ON_ERROR_STOP=1",
        ]
        for key, value in (variables or {}).items():
            args.extend(["-v", f"{key}={'' if value is None else value}"])
        if command is not None:
            args.extend(["-c", command])
        else:
            args.extend(["-f", "-"])

        try:
            completed = subprocess.run(
                args,
                input=script,
                capture_output=True,
                text=True,
                env=self._environment(),
                timeout=config.query_timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise CatalogError(f"psql executable not found: {self.psql_path}") from e
        except subprocess.TimeoutExpired as e:
            raise CatalogError(f"psql timed out after {config.query_timeout}s") from e

        if completed.returncode != 0:
            raise CatalogError(
                f"psql exited with status {completed.returncode}: {completed.stderr.strip()}"
            )
        return completed.stdout

    def _environment(self) -> dict[str, str]:
        cfg = self.connection_config
        env = os.environ.copy()
        if cfg.password is not None:
            env["PGPASSWORD"] = cfg.password
        env["PGSSLMODE"] = cfg.sslmode
        env["PGCONNECT_TIMEOUT"] = str(config.connection_timeout)
        return env
