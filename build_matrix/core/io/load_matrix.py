from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import yaml

from build_matrix.core.errors import MatrixDecodeError, MatrixLoadError
from build_matrix.core.expand.expand_matrix import expand_matrix
from build_matrix.core.expand.limits import DEFAULT_LIMITS, ExpandLimits
from build_matrix.core.model import Axis, Matrix


MATRIX_KEY = "matrix"

# BaseLoader keeps every scalar as text, so YAML nulls arrive as these strings.
_YAML_NULLS = frozenset({"", "~", "null", "Null", "NULL"})


def decode_matrix(raw: str, *, file: Optional[str] = None) -> Matrix:
    """Extract the matrix section from a raw YAML document.

    Scalars are kept verbatim (`1.10` stays "1.10", `yes` stays "yes").
    An empty document or a missing/null matrix section decodes to {}.
    """

    try:
        data = yaml.load(raw, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        raise MatrixLoadError(code="E_YAML_PARSE", message=str(e), file=file) from e

    return _decode_data(data, file=file, nulls=_YAML_NULLS)


def decode_matrix_json(raw: str, *, file: Optional[str] = None) -> Matrix:
    """Extract the matrix section from a raw JSON document.

    Numbers and booleans become their JSON text (`1.8` -> "1.8", `true` -> "true").
    Only JSON null counts as null; the string "null" is a value.
    """

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MatrixLoadError(code="E_JSON_PARSE", message=str(e), file=file) from e

    return _decode_data(data, file=file, nulls=frozenset())


def _decode_data(data: Any, *, file: Optional[str], nulls: frozenset[str]) -> Matrix:
    if _is_null(data, nulls):
        return {}
    if not isinstance(data, dict):
        raise MatrixDecodeError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=file,
        )

    section = data.get(MATRIX_KEY)
    if _is_null(section, nulls):
        return {}
    if not isinstance(section, dict):
        raise MatrixDecodeError(
            code="E_MATRIX_NOT_MAPPING",
            message="matrix must be a mapping of variable name -> list of values",
            file=file,
            path=MATRIX_KEY,
        )

    matrix: Matrix = {}
    for name, values in section.items():
        var_path = f"{MATRIX_KEY}.{name}"
        if _is_null(values, nulls):
            matrix[name] = []
            continue
        if not isinstance(values, list):
            raise MatrixDecodeError(
                code="E_MATRIX_VALUES_NOT_LIST",
                message="variable values must be a list",
                file=file,
                path=var_path,
            )
        matrix[name] = [
            _decode_value(v, file=file, path=f"{var_path}[{i}]", nulls=nulls)
            for i, v in enumerate(values)
        ]
    return matrix


def parse_matrix(
    raw: str, *, file: Optional[str] = None, limits: ExpandLimits = DEFAULT_LIMITS
) -> list[Axis]:
    """Decode the matrix section of raw and return its axes.

    A document without a matrix gives []. Deciding that such a build still runs
    once, without variables, is up to the caller.
    """
    matrix = decode_matrix(raw, file=file)
    if not matrix:
        return []
    return expand_matrix(matrix, limits=limits)


def load_matrix(path: str) -> Matrix:
    """Load the matrix section from a YAML/JSON file."""

    p = Path(path)
    if not p.exists():
        raise MatrixLoadError(
            code="E_FILE_NOT_FOUND",
            message="file does not exist",
            file=str(p),
        )

    if p.suffix.lower() not in {".yaml", ".yml", ".json"}:
        raise MatrixLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message="supported formats are .yaml/.yml and .json",
            file=str(p),
        )

    try:
        raw_text = p.read_text(encoding="utf-8")
    except Exception as e:  # pragma: no cover
        raise MatrixLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    if p.suffix.lower() == ".json":
        return decode_matrix_json(raw_text, file=str(p))
    return decode_matrix(raw_text, file=str(p))


def _is_null(v: Any, nulls: frozenset[str]) -> bool:
    return v is None or (isinstance(v, str) and v in nulls)


def _decode_value(v: Any, *, file: Optional[str], path: str, nulls: frozenset[str]) -> str:
    if _is_null(v, nulls):
        return ""
    if isinstance(v, str):
        return v
    # only reachable from JSON
    if isinstance(v, (bool, int, float)):
        return json.dumps(v)
    raise MatrixDecodeError(
        code="E_MATRIX_INVALID_VALUE",
        message="matrix values must be scalars",
        file=file,
        path=path,
    )
