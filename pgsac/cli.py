"""PGSAC CLI - Command-line interface for PostgreSQL schema as code."""

import os
from pathlib import Path
from typing import Any, Optional

import typer
from typing_extensions import Annotated

from pgsac import __version__
from pgsac.core.runner import ExtractRunner
from pgsac.exceptions import PGSACError, ValidationError
from pgsac.models.project import Project
from pgsac.models.results import RunResult
from pgsac.utils.logging import configure_logging
from pgsac.utils.yaml_parser import load_project, load_yaml, parse_project, save_yaml

app = typer.Typer(
    name="pgsac",
    help="PGSAC - PostgreSQL schema as code",
    add_completion=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"pgsac version {__version__}")
        raise typer.Exit()


def _apply_overrides(
    data: dict[str, Any],
    host: Optional[str] = None,
    port: Optional[int] = None,
    dbname: Optional[str] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
    sslmode: Optional[str] = None,
    output: Optional[Path] = None,
    schemas: Optional[str] = None,
    backend: Optional[str] = None,
    extended: bool = False,
    no_disambiguate: bool = False,
) -> dict[str, Any]:
    """Layer command-line flags over project file data.

    Flags win over the project file. The password falls back to
    PGPASSWORD when neither sets it.
    """
    data = dict(data)

    connection = dict(data.get("connection") or {})
    flags = {
        "host": host,
        "port": port,
        "database": dbname,
        "user": user,
        "password": password,
        "sslmode": sslmode,
    }
    for key, value in flags.items():
        if value is not None:
            connection[key] = value
    if not connection.get("password") and os.environ.get("PGPASSWORD"):
        connection["password"] = os.environ["PGPASSWORD"]
    data["connection"] = connection

    if output is not None:
        data["output"] = str(output)
    if schemas is not None:
        data["schemas"] = [name.strip() for name in schemas.split(",")]
    if backend is not None:
        data["backend"] = backend
    if extended:
        psql = dict(data.get("psql") or {})
        psql["extended"] = True
        data["psql"] = psql
    if no_disambiguate:
        data["disambiguate_overloads"] = False
    return data


def _display_result(result: RunResult, verbose: bool = False) -> None:
    """Display run result to console."""
    typer.echo("\n" + "=" * 60)
    if result.success:
        typer.secho("Extraction succeeded!", fg=typer.colors.GREEN, bold=True)
    else:
        typer.secho("Extraction failed!", fg=typer.colors.RED, bold=True)
        if result.error_message:
            typer.echo(f"Error: {result.error_message}")

    typer.echo(f"\nBackend: {result.backend}")
    typer.echo(f"Schemas extracted: {result.schemas_extracted}")
    typer.echo(f"Objects extracted: {result.objects_extracted}")
    if result.export_result is not None:
        typer.echo(f"Files written: {result.export_result.file_count}")
        typer.echo(f"Output directory: {result.export_result.output_dir}")
    typer.echo(f"Duration: {result.duration_seconds:.2f}s")

    if verbose and result.export_result is not None:
        typer.echo("\nFiles:")
        for path in result.export_result.files_written:
            typer.echo(f"  {path}")


def _display_project(project: Project) -> None:
    cfg = project.connection
    typer.echo(f"\nVersion: {project.version}")
    typer.echo(f"Backend: {project.backend}")
    typer.echo(f"Connection: {cfg.user}@{cfg.host}:{cfg.port}/{cfg.database} (sslmode={cfg.sslmode})")
    typer.echo(f"Password: {'set' if cfg.password else 'not set'}")
    typer.echo(f"Schemas: {', '.join(project.schemas)}")
    typer.echo(f"Output: {project.output}")
    typer.echo(f"Disambiguate overloads: {project.disambiguate_overloads}")
    if project.backend == "psql":
        typer.echo(f"psql: {project.psql.path} (extended={project.psql.extended})")


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """PGSAC - Export PostgreSQL schemas as version-controllable SQL files."""
    pass


@app.command()
def extract(
    project_path: Annotated[
        Optional[Path],
        typer.Argument(
            help="Path to the YAML project file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    host: Annotated[
        Optional[str],
        typer.Option("--host", "-h", help="Database host"),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", help="Database port"),
    ] = None,
    dbname: Annotated[
        Optional[str],
        typer.Option("--dbname", "-d", help="Database name"),
    ] = None,
    user: Annotated[
        Optional[str],
        typer.Option("--user", "-U", help="Database user"),
    ] = None,
    password: Annotated[
        Optional[str],
        typer.Option("--password", help="Database password (default: PGPASSWORD)"),
    ] = None,
    sslmode: Annotated[
        Optional[str],
        typer.Option("--sslmode", help="libpq SSL mode"),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output directory"),
    ] = None,
    schemas: Annotated[
        Optional[str],
        typer.Option("--schemas", "-s", help="Comma-separated schemas to extract (e.g., 'public,app')"),
    ] = None,
    backend: Annotated[
        Optional[str],
        typer.Option("--backend", "-b", help="Catalog backend: sql or psql"),
    ] = None,
    extended: Annotated[
        bool,
        typer.Option("--extended", help="Use verbose psql listing commands"),
    ] = False,
    no_disambiguate: Annotated[
        bool,
        typer.Option("--no-disambiguate", help="Name overloaded function files by base name only"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose output"),
    ] = False,
) -> None:
    """Extract schemas from a database and write them as SQL files."""
    configure_logging(level="DEBUG" if verbose else None)
    try:
        if project_path is not None:
            typer.echo(f"Loading project: {project_path}")
            data = load_yaml(project_path)
            source = str(project_path)
        else:
            data = {}
            source = "command line"

        data = _apply_overrides(
            data,
            host=host,
            port=port,
            dbname=dbname,
            user=user,
            password=password,
            sslmode=sslmode,
            output=output,
            schemas=schemas,
            backend=backend,
            extended=extended,
            no_disambiguate=no_disambiguate,
        )
        project = parse_project(data, source=source)

        typer.echo(f"Extracting schemas: {', '.join(project.schemas)}")
        result = ExtractRunner().run(project)

        _display_result(result, verbose)

        if not result.success:
            raise typer.Exit(code=1)

    except ValidationError as e:
        typer.secho(f"Validation error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except PGSACError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command()
def validate(
    project_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the YAML project file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
) -> None:
    """Validate a project YAML file."""
    try:
        typer.echo(f"Validating project: {project_path}")
        project = load_project(project_path)

        typer.secho("✓ Project is valid!", fg=typer.colors.GREEN, bold=True)
        _display_project(project)

    except ValidationError as e:
        typer.secho(f"✗ Validation failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command()
def init(
    database: Annotated[
        str,
        typer.Argument(help="Database the project extracts from"),
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Path of the project file to create"),
    ] = Path("pgsac.yaml"),
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing project file"),
    ] = False,
) -> None:
    """Create a new project file template."""
    if output.exists() and not force:
        typer.secho(
            f"✗ {output} already exists (use --force to overwrite)",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)

    template = {
        "version": 1,
        "backend": "sql",
        "output": "./schemas",
        "schemas": ["public"],
        "disambiguate_overloads": True,
        "connection": {
            "host": "localhost",
            "port": 5432,
            "database": database,
            "user": "postgres",
            "password": "${PGPASSWORD:-}",
            "sslmode": "disable",
        },
        "psql": {
            "path": "psql",
            "extended": False,
        },
    }

    try:
        save_yaml(template, output)
    except ValidationError as e:
        typer.secho(f"✗ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.secho(f"✓ Created project template: {output}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
