from __future__ import annotations

import json
import logging
from typing import Any

import typer

from build_matrix.core.errors import MatrixDecodeError, MatrixError, MatrixLoadError
from build_matrix.core.expand.expand_matrix import count_permutations, expand_matrix
from build_matrix.core.expand.limits import ExpandLimits, LimitsConfigError, load_and_merge
from build_matrix.core.io.load_matrix import load_matrix

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def _callback() -> None:
    """Build matrix CLI."""
    return


@app.command("expand")
def expand(
    path: str = typer.Argument(..., help="Path to a build file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    limits_file: str | None = typer.Option(
        None,
        "--limits-file",
        help="Optional YAML file overriding limit_tags/limit_axis",
    ),
    limit_tags: int | None = typer.Option(
        None, "--limit-tags", help="Override limit_tags (axes hold at most limit_tags+1 variables)"
    ),
    limit_axis: int | None = typer.Option(
        None, "--limit-axis", help="Override limit_axis (at most limit_axis+1 axes)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
) -> None:
    """Expand the matrix section of a build file into one axis per build."""
    _configure_logging(verbose)

    if format not in ("text", "json"):
        err = MatrixDecodeError(
            code="E_EXPAND_UNKNOWN_FORMAT",
            message=f"unknown format: {format} (choose one of: text, json)",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)

    def _to_item(e: MatrixError) -> dict:
        source = "load" if isinstance(e, MatrixLoadError) else "decode"
        return {
            "code": e.code,
            "message": e.message,
            "file": e.file,
            "path": e.path,
            "severity": "error",
            "source": source,
        }

    def _fail(errors: list[MatrixError], exit_code: int) -> None:
        if format == "json":
            payload = {
                "tool": "matrix",
                "command": "expand",
                "ok": False,
                "axis_count": 0,
                "permutations": None,
                "truncated": False,
                "axes": [],
                "error_count": len(errors),
                "errors": [_to_item(e) for e in errors],
            }
            typer.echo(json.dumps(payload, indent=2))
        else:
            _print_errors(errors)
        raise typer.Exit(code=exit_code)

    try:
        limits = _load_limits(limits_file, {"limit_tags": limit_tags, "limit_axis": limit_axis})
        matrix = load_matrix(path)
    except MatrixLoadError as e:
        _fail([e], 1)
        return
    except MatrixDecodeError as e:
        _fail([e], 2)
        return

    axes = expand_matrix(matrix, limits=limits)
    permutations = count_permutations(matrix)
    truncated = len(axes) < permutations or any(len(a) < len(matrix) for a in axes)

    if format == "json":
        payload = {
            "tool": "matrix",
            "command": "expand",
            "ok": True,
            "axis_count": len(axes),
            "permutations": permutations,
            "truncated": truncated,
            "axes": [a.env() for a in axes],
            "error_count": 0,
            "errors": [],
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    if not matrix:
        typer.echo("no matrix: 0 axes", err=True)
        return
    if not axes:
        empty = [name for name, values in matrix.items() if not values]
        typer.echo(
            f"matrix has 0 permutations (empty value list: {', '.join(empty)})", err=True
        )
        return

    for a in axes:
        typer.echo(str(a))

    if truncated:
        typer.echo(
            f"WARN: matrix truncated to {len(axes)} of {permutations} permutations "
            f"(limit_tags={limits.limit_tags}, limit_axis={limits.limit_axis})",
            err=True,
        )


@app.command("limits")
def limits_cmd(
    limits_file: str | None = typer.Option(
        None,
        "--limits-file",
        help="Optional YAML file overriding limit_tags/limit_axis",
    ),
) -> None:
    """Show the effective expansion limits."""

    try:
        effective = _load_limits(limits_file, None)
    except MatrixLoadError as e:
        _print_errors([e])
        raise typer.Exit(code=1)
    except MatrixDecodeError as e:
        _print_errors([e])
        raise typer.Exit(code=2)

    typer.echo("Limits:")
    typer.echo(f"- limit_tags: {effective.limit_tags} (max {effective.max_tags} variables per axis)")
    typer.echo(f"- limit_axis: {effective.limit_axis} (max {effective.max_axis} axes)")


def _load_limits(limits_file: str | None, overrides: dict[str, Any] | None) -> ExpandLimits:
    try:
        return load_and_merge(limits_file, overrides)
    except FileNotFoundError as e:
        raise MatrixLoadError(
            code="E_LIMITS_FILE_NOT_FOUND",
            message=f"limits file not found: {limits_file}",
            file=None,
            path="limits_file",
        ) from e
    except LimitsConfigError as e:
        raise MatrixDecodeError(
            code="E_LIMITS_INVALID",
            message=str(e),
            file=limits_file,
            path="limits",
        ) from e


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _print_errors(errors: list[MatrixError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="matrix")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
