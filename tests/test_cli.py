"""CLI tests: init / add / list / show / fragment through click's runner."""

import pytest
from click.testing import CliRunner

from gqlallow.cli import cli
from tests.conftest import USER_DOC


@pytest.fixture
def project(tmp_path, monkeypatch):
    for key in ("GQLALLOW_ROOT", "GQLALLOW_READ_ONLY", "GQLALLOW_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["init", "gw", "--dir", str(tmp_path)])
    assert result.exit_code == 0, result.output
    (tmp_path / "user.graphql").write_text(USER_DOC)
    return tmp_path


def test_init_creates_layout(project):
    assert (project / "allowlist.toml").exists()
    assert (project / ".allowlist" / "queries").is_dir()
    assert (project / ".allowlist" / "fragments").is_dir()


def test_init_twice(project):
    result = CliRunner().invoke(cli, ["init", "--dir", str(project)])
    assert result.exit_code == 0
    assert "already exists" in result.output


def test_add_then_show(project):
    runner = CliRunner()
    result = runner.invoke(cli, ["add", "user.graphql", "-n", "users", "--order-var", "id",
                                 "--order-value", "1", "--order-value", "2"])
    assert result.exit_code == 0, result.output
    assert "users.GetUser.yaml" in result.output

    result = runner.invoke(cli, ["show", "GetUser", "-n", "users"])
    assert result.exit_code == 0, result.output
    assert "name: GetUser" in result.output
    assert "namespace: users" in result.output
    assert "var: id" in result.output


def test_add_with_vars_file(project):
    (project / "vars.json").write_text('{"id": 9}')
    result = CliRunner().invoke(cli, ["add", "user.graphql", "--vars", "vars.json"])
    assert result.exit_code == 0, result.output
    text = (project / ".allowlist" / "queries" / "GetUser.yaml").read_text()
    assert '"id": 9' in text


def test_add_anonymous_reports_failure(project):
    (project / "anon.graphql").write_text("query { me { id } }")
    result = CliRunner().invoke(cli, ["add", "anon.graphql"])
    assert result.exit_code != 0
    assert "not saved" in result.output


def test_add_malformed(project):
    (project / "bad.graphql").write_text("query A { a ")
    result = CliRunner().invoke(cli, ["add", "bad.graphql"])
    assert result.exit_code != 0
    assert "no closing brace" in result.output


def test_list(project):
    runner = CliRunner()
    runner.invoke(cli, ["add", "user.graphql", "-n", "users"])
    result = runner.invoke(cli, ["list"])
    assert result.exit_code == 0, result.output
    assert "GetUser" in result.output
    assert "1 operation(s)" in result.output

    result = runner.invoke(cli, ["list", "-n", "other"])
    assert "0 operation(s)" in result.output


def test_fragment(project):
    runner = CliRunner()
    runner.invoke(cli, ["add", "user.graphql", "-n", "users"])
    result = runner.invoke(cli, ["fragment", "UserFields", "-n", "users"])
    assert result.exit_code == 0, result.output
    assert result.output.startswith("fragment UserFields on User {")


def test_show_missing(project):
    result = CliRunner().invoke(cli, ["show", "Nope"])
    assert result.exit_code != 0
    assert "not in allow list" in result.output


def test_fragment_missing(project):
    result = CliRunner().invoke(cli, ["fragment", "Nope"])
    assert result.exit_code != 0
    assert "no such fragment" in result.output
