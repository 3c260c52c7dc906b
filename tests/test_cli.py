import json

from typer.testing import CliRunner

from assertthat.cli import app

runner = CliRunner()


IMPORT = "from assertthat import assert_that\n"


def _write_tests(tmp_path, good=True):
    tests = tmp_path / "tests"
    tests.mkdir()
    (tests / "test_ok.py").write_text(IMPORT + 'assert_that([1], "has len == 1")\n')
    if not good:
        (tests / "test_bad.py").write_text(
            IMPORT + 'x = 1\nassert_that([1], "has frobnicate == 1")\n'
        )
    return tests


# --- check ---


def test_check_clean_directory(tmp_path):
    tests = _write_tests(tmp_path)
    result = runner.invoke(app, ["check", str(tests)])
    assert result.exit_code == 0
    assert result.output == ""


def test_check_reports_problems(tmp_path):
    tests = _write_tests(tmp_path, good=False)
    result = runner.invoke(app, ["check", str(tests)])
    assert result.exit_code == 1
    assert f"{tests / 'test_bad.py'}:3:1: malformed phrase" in result.output
    assert "unknown property 'frobnicate'" in result.output
    assert "Found 1 malformed phrase(s)" in result.output


def test_check_verbose_summary(tmp_path):
    tests = _write_tests(tmp_path)
    result = runner.invoke(app, ["check", "-v", str(tests)])
    assert result.exit_code == 0
    assert "Checked 1 file(s)" in result.output


def test_check_missing_path(tmp_path):
    result = runner.invoke(app, ["check", str(tmp_path / "nope")])
    assert result.exit_code != 0
    assert "path not found" in result.output


def test_check_missing_config(tmp_path):
    tests = _write_tests(tmp_path)
    result = runner.invoke(
        app, ["check", str(tests), "--config", str(tmp_path / "none.yaml")]
    )
    assert result.exit_code != 0
    assert "config file not found" in result.output


def test_check_invalid_config(tmp_path):
    tests = _write_tests(tmp_path)
    config = tmp_path / "assertthat.yaml"
    config.write_text("unknown_key: 1\n")
    result = runner.invoke(app, ["check", str(tests), "--config", str(config)])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_check_config_with_yaml_syntax_error(tmp_path):
    tests = _write_tests(tmp_path)
    config = tmp_path / "assertthat.yaml"
    config.write_text("max_repr_length: [1,\n")
    result = runner.invoke(app, ["check", str(tests), "--config", str(config)])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_check_writes_debug_log(tmp_path):
    tests = _write_tests(tmp_path)
    config = tmp_path / "assertthat.yaml"
    config.write_text("log_file: debug.log\n")
    result = runner.invoke(app, ["check", str(tests), "--config", str(config)])
    assert result.exit_code == 0
    assert "Scanned" in (tmp_path / "debug.log").read_text()


# --- explain ---


def test_explain_len_phrase():
    result = runner.invoke(app, ["explain", "has len == 2"])
    assert result.exit_code == 0
    assert result.output.splitlines() == [
        "LenCompare: has len == 2",
        "  kind: len",
        "  op: ==",
        "  value: 2",
    ]


def test_explain_contains_phrase():
    result = runner.invoke(app, ["explain", "contains 'a', 2"])
    assert result.exit_code == 0
    assert "Contains: contains 'a', 2" in result.output
    assert "  values: ('a', 2)" in result.output


def test_explain_malformed_phrase():
    result = runner.invoke(app, ["explain", "has frobnicate == 1"])
    assert result.exit_code == 1
    assert "Error: malformed phrase" in result.output


# --- schema ---


def test_schema_to_stdout():
    result = runner.invoke(app, ["schema"])
    assert result.exit_code == 0
    schema = json.loads(result.output)
    assert schema["title"] == "assertthat config"
    assert "max_repr_length" in schema["properties"]


def test_schema_to_file(tmp_path):
    out = tmp_path / "schemas" / "assertthat.schema.json"
    result = runner.invoke(app, ["schema", "--out", str(out)])
    assert result.exit_code == 0
    assert out.exists()
    assert json.loads(out.read_text())["additionalProperties"] is False
