import logging
from pathlib import Path
from typing import Annotated, Final

import typer

from dts_critic.exceptions import CriticError
from dts_critic.loaders.json_loader import JsonLoader
from dts_critic.loaders.yaml_loader import YamlLoader
from dts_critic.models.config import CriticConfig
from dts_critic.models.diagnostic import ErrorKind, to_error_kind
from dts_critic.models.report import CriticReport
from dts_critic.services.critic import DtsCritic
from dts_critic.utils.text import line_and_column

app = typer.Typer(
    name="dts-critic",
    add_completion=False,
    no_args_is_help=True,
    help="Check TypeScript declaration files against the JavaScript modules they describe.",
)

EXIT_DIAGNOSTICS: Final[int] = 1
EXIT_FATAL: Final[int] = 2
YAML_SUFFIXES: Final[set[str]] = {".yaml", ".yml"}


def _parse_kinds(names: list[str]) -> list[ErrorKind]:
    kinds: list[ErrorKind] = []
    for name in names:
        kind = to_error_kind(name)
        if kind is None:
            raise typer.BadParameter(f"Unknown diagnostic kind '{name}'")
        kinds.append(kind)
    return kinds


def _write_report(report: CriticReport, output_path: Path) -> None:
    if output_path.suffix.lower() in YAML_SUFFIXES:
        YamlLoader(output_path).load(report)
    else:
        JsonLoader(output_path).load(report)


def _print_report(report: CriticReport, declaration: str) -> None:
    for diagnostic in report.diagnostics:
        location = ""
        if diagnostic.position is not None:
            line, column = line_and_column(declaration, diagnostic.position)
            location = f":{line}:{column}"
        typer.secho(
            f"{report.declaration_path}{location} [{diagnostic.kind}]",
            fg=typer.colors.YELLOW,
            bold=True,
        )
        typer.echo(diagnostic.message)
        typer.echo()


@app.command("check")
def check(
    dts_path: Annotated[
        Path,
        typer.Argument(
            help="Declaration file to critique.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    source_path: Annotated[
        Path | None,
        typer.Argument(
            help="JavaScript file or package folder. When omitted, the package is fetched from npm.",
            exists=True,
            resolve_path=True,
        ),
    ] = None,
    enable: Annotated[
        list[str] | None,
        typer.Option("--enable", help="Diagnostic kind to enable (repeatable)."),
    ] = None,
    disable: Annotated[
        list[str] | None,
        typer.Option("--disable", help="Diagnostic kind to disable (repeatable)."),
    ] = None,
    output_path: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the report to this file (.json, or .yaml/.yml).",
            file_okay=True,
            dir_okay=False,
            writable=True,
            resolve_path=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log debug output."),
    ] = False,
) -> None:
    """Check one declaration file and report every mismatch found.

    Exits with 0 when the declaration matches, 1 when diagnostics were reported
    and 2 when the check could not run.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    enabled_errors: dict[ErrorKind, bool] = {}
    for kind in _parse_kinds(disable or []):
        enabled_errors[kind] = False
    for kind in _parse_kinds(enable or []):
        enabled_errors[kind] = True

    critic = DtsCritic(config=CriticConfig(enabled_errors=enabled_errors))
    try:
        report = critic.critique(dts_path, source_path)
    except CriticError as e:
        typer.secho(f"dts-critic: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=EXIT_FATAL) from e

    if output_path is not None:
        _write_report(report, output_path)

    if report.passed:
        typer.secho(f"{report.name}: declaration matches the JavaScript module", fg=typer.colors.GREEN)
        return

    _print_report(report, dts_path.read_text(encoding="utf-8"))
    typer.secho(
        f"{report.name}: {len(report.diagnostics)} problem(s) found",
        fg=typer.colors.RED,
    )
    raise typer.Exit(code=EXIT_DIAGNOSTICS)


@app.command("kinds")
def kinds() -> None:
    """List the diagnostic kinds accepted by --enable and --disable."""
    for kind in ErrorKind:
        typer.echo(kind.value)


def main() -> None:
    """Entry point for executing the Typer application."""
    app()


if __name__ == "__main__":
    main()
