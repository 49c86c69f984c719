from pathlib import Path

import pytest

from build_matrix.core.errors import MatrixDecodeError, MatrixLoadError
from build_matrix.core.expand.limits import ExpandLimits
from build_matrix.core.io.load_matrix import decode_matrix, load_matrix, parse_matrix


def test_load_matrix_success():
    matrix = load_matrix("examples/matrix-basic.yaml")
    assert matrix == {"go": ["1.8", "1.9"], "redis": ["2.8", "3.0"]}
    assert list(matrix.keys()) == ["go", "redis"]


def test_load_matrix_without_section():
    assert load_matrix("examples/matrix-none.yaml") == {}


def test_load_missing_file():
    try:
        load_matrix("examples/does-not-exist.yaml")
        assert False, "expected MatrixLoadError"
    except MatrixLoadError as e:
        assert e.code == "E_FILE_NOT_FOUND"


def test_load_unsupported_format(tmp_path):
    p = tmp_path / "build.txt"
    p.write_text("matrix: {}", encoding="utf-8")
    try:
        load_matrix(str(p))
        assert False, "expected MatrixLoadError"
    except MatrixLoadError as e:
        assert e.code == "E_UNSUPPORTED_FORMAT"


def test_load_json(tmp_path: Path):
    p = tmp_path / "build.json"
    p.write_text('{"matrix": {"go": ["1.8", "1.9"]}}', encoding="utf-8")
    assert load_matrix(str(p)) == {"go": ["1.8", "1.9"]}


def test_decode_keeps_scalar_text():
    matrix = decode_matrix("matrix:\n  go: [1.8, 1.10]\n  debug: [yes, no]\n")
    assert matrix == {"go": ["1.8", "1.10"], "debug": ["yes", "no"]}


@pytest.mark.parametrize("raw", ["", "matrix:\n", "matrix: ~\n", "image: golang\n"])
def test_decode_empty_or_absent(raw: str):
    assert decode_matrix(raw) == {}


def test_decode_null_variable_is_empty_list():
    assert decode_matrix("matrix:\n  go:\n") == {"go": []}


def test_decode_invalid_yaml():
    with pytest.raises(MatrixLoadError) as exc:
        decode_matrix("matrix: [unclosed\n", file="build.yml")
    assert exc.value.code == "E_YAML_PARSE"
    assert exc.value.file == "build.yml"


def test_decode_top_level_not_mapping():
    with pytest.raises(MatrixDecodeError) as exc:
        decode_matrix("- a\n- b\n")
    assert exc.value.code == "E_INVALID_TOP_LEVEL"


def test_decode_matrix_not_mapping():
    with pytest.raises(MatrixDecodeError) as exc:
        decode_matrix("matrix:\n  - go\n")
    assert exc.value.code == "E_MATRIX_NOT_MAPPING"
    assert exc.value.path == "matrix"


def test_decode_values_not_list():
    with pytest.raises(MatrixDecodeError) as exc:
        load_matrix("examples/matrix-invalid-values.yaml")
    assert exc.value.code == "E_MATRIX_VALUES_NOT_LIST"
    assert exc.value.path == "matrix.go"
    assert str(exc.value).endswith("matrix.go: E_MATRIX_VALUES_NOT_LIST: variable values must be a list")


def test_decode_nested_value():
    with pytest.raises(MatrixDecodeError) as exc:
        decode_matrix("matrix:\n  go:\n    - 1.8\n    - {version: 1.9}\n")
    assert exc.value.code == "E_MATRIX_INVALID_VALUE"
    assert exc.value.path == "matrix.go[1]"


def test_parse_matrix_expands():
    raw = Path("examples/matrix-basic.yaml").read_text(encoding="utf-8")
    axes = parse_matrix(raw)
    assert [str(a) for a in axes] == [
        "go=1.8,redis=2.8",
        "go=1.8,redis=3.0",
        "go=1.9,redis=2.8",
        "go=1.9,redis=3.0",
    ]


def test_parse_matrix_without_section_is_empty():
    assert parse_matrix("image: golang\n") == []


def test_parse_matrix_with_limits():
    axes = parse_matrix(
        "matrix:\n  go: [1.8, 1.9]\n  redis: [2.8, 3.0]\n",
        limits=ExpandLimits(limit_tags=10, limit_axis=0),
    )
    assert axes == [{"go": "1.8", "redis": "2.8"}]


def test_load_json_tab_indented(tmp_path: Path):
    p = tmp_path / "build.json"
    p.write_text('{\n\t"matrix": {\n\t\t"go": ["1.8", "1.9"]\n\t}\n}\n', encoding="utf-8")
    assert load_matrix(str(p)) == {"go": ["1.8", "1.9"]}


def test_load_json_invalid(tmp_path: Path):
    p = tmp_path / "build.json"
    p.write_text('{"matrix": {"go": ["1.8",]}', encoding="utf-8")
    with pytest.raises(MatrixLoadError) as exc:
        load_matrix(str(p))
    assert exc.value.code == "E_JSON_PARSE"
    assert exc.value.file == str(p)


def test_load_json_scalars_become_text(tmp_path: Path):
    p = tmp_path / "build.json"
    p.write_text(
        '{"matrix": {"go": [1.8, 2], "race": [true, false], "tag": ["null", null], "os": null}}',
        encoding="utf-8",
    )
    assert load_matrix(str(p)) == {
        "go": ["1.8", "2"],
        "race": ["true", "false"],
        "tag": ["null", ""],
        "os": [],
    }


def test_load_json_shape_errors(tmp_path: Path):
    p = tmp_path / "build.json"
    p.write_text('{"matrix": {"go": "1.8"}}', encoding="utf-8")
    with pytest.raises(MatrixDecodeError) as exc:
        load_matrix(str(p))
    assert exc.value.code == "E_MATRIX_VALUES_NOT_LIST"
    assert exc.value.path == "matrix.go"


def test_error_string_without_location():
    e = MatrixDecodeError(code="E_X", message="boom")
    assert str(e) == "<build file>: E_X: boom"
