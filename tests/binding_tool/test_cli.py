"""Tests for the `bt` command line."""

import hashlib

import pytest
from click.testing import CliRunner

from binding_tool.binding_tool_utils import HttpUtils
from binding_tool.cli import bt


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def env(bindings_root):
    return {"SERVICE_BINDING_ROOT": str(bindings_root)}


class TestAddCommand:
    def test_add(self, runner, env, bindings_root):
        result = runner.invoke(bt, ["add", "-t", "binding", "-p", "foo=bar", "-p", "gorilla=banana"], env=env)

        assert result.exit_code == 0, result.output
        assert (bindings_root / "binding" / "foo").read_text() == "bar"
        assert (bindings_root / "binding" / "gorilla").read_text() == "banana"

    def test_add_prompts_before_overwrite(self, runner, env, bindings_root):
        runner.invoke(bt, ["add", "-t", "binding", "-p", "foo=bar"], env=env)

        result = runner.invoke(bt, ["add", "-t", "binding", "-p", "foo=baz"], env=env, input="no\n")

        assert result.exit_code == 1
        assert "The binding already exists, do you wish to continue? (yes or no)" in result.output
        assert (bindings_root / "binding" / "foo").read_text() == "bar"

    def test_add_confirmed_overwrite(self, runner, env, bindings_root):
        runner.invoke(bt, ["add", "-t", "binding", "-p", "foo=bar"], env=env)

        result = runner.invoke(bt, ["add", "-t", "binding", "-p", "foo=baz"], env=env, input="yes\n")

        assert result.exit_code == 0, result.output
        assert (bindings_root / "binding" / "foo").read_text() == "baz"

    def test_add_force(self, runner, env, bindings_root):
        runner.invoke(bt, ["add", "-t", "binding", "-p", "foo=bar"], env=env)
        result = runner.invoke(bt, ["add", "-f", "-n", "binding", "-t", "binding", "-p", "foo=baz"], env=env)

        assert result.exit_code == 0, result.output
        assert (bindings_root / "binding" / "foo").read_text() == "baz"

    def test_add_malformed_pair(self, runner, env):
        result = runner.invoke(bt, ["add", "-t", "binding", "-p", "foobar"], env=env)

        assert result.exit_code == 1
        assert "could not parse key/value -> foobar" in result.output

    def test_add_requires_type(self, runner, env):
        result = runner.invoke(bt, ["add", "-p", "foo=bar"], env=env)
        assert result.exit_code == 2

    def test_invalid_environment(self, runner, env):
        result = runner.invoke(bt, ["add", "-t", "b", "-p", "k=v"], env={**env, "BT_MAX_SIMULTANEOUS": "many"})

        assert result.exit_code == 1
        assert "BT_MAX_SIMULTANEOUS" in result.output


class TestDeleteCommand:
    def test_delete_key_force(self, runner, env, bindings_root):
        runner.invoke(bt, ["add", "-t", "binding", "-p", "k1=v1", "-p", "k2=v2"], env=env)

        result = runner.invoke(bt, ["delete", "-f", "-n", "binding", "-k", "k1"], env=env)

        assert result.exit_code == 0, result.output
        assert not (bindings_root / "binding" / "k1").exists()
        assert (bindings_root / "binding" / "k2").exists()

    def test_delete_binding_declined(self, runner, env, bindings_root):
        runner.invoke(bt, ["add", "-t", "binding", "-p", "k1=v1"], env=env)

        result = runner.invoke(bt, ["delete", "-n", "binding"], env=env, input="n\n")

        assert result.exit_code == 1
        assert "Are you sure you want to delete" in result.output
        assert (bindings_root / "binding" / "k1").exists()

    def test_delete_binding_confirmed(self, runner, env, bindings_root):
        runner.invoke(bt, ["add", "-t", "binding", "-p", "k1=v1"], env=env)

        result = runner.invoke(bt, ["delete", "-n", "binding"], env=env, input="y\n")

        assert result.exit_code == 0, result.output
        assert not (bindings_root / "binding").exists()


class TestCaCertsCommand:
    def test_ca_certs(self, runner, env, bindings_root, tmp_path):
        cert = tmp_path / "root.pem"
        cert.write_text("cert")

        result = runner.invoke(bt, ["ca-certs", "-c", str(cert)], env=env)

        assert result.exit_code == 0, result.output
        assert (bindings_root / "ca-certificates" / "type").read_text() == "ca-certificates"
        assert (bindings_root / "ca-certificates" / "root.pem").read_text() == "cert"


class TestDependencyMappingCommand:
    def test_dependency_mapping_from_toml(self, runner, env, bindings_root, tmp_path, make_session, monkeypatch):
        body = b"artifact"
        uri = "https://example.com/dl/artifact.jar"
        toml = tmp_path / "buildpack.toml"
        toml.write_text(
            f'[[metadata.dependencies]]\nuri = "{uri}"\nsha256 = "{hashlib.sha256(body).hexdigest()}"\n'
        )
        session = make_session({uri: body})
        monkeypatch.setattr(HttpUtils, "create_session", staticmethod(lambda config: session))

        result = runner.invoke(bt, ["dependency-mapping", "-t", str(toml)], env=env)

        assert result.exit_code == 0, result.output
        assert (bindings_root / "dependency-mapping" / "binaries" / "artifact.jar").read_bytes() == body
        assert "Mapped 1 dependencies" in result.output

    def test_dependency_mapping_requires_one_source(self, runner, env):
        result = runner.invoke(bt, ["dependency-mapping"], env=env)
        assert result.exit_code == 2


class TestArgsCommand:
    def test_no_bindings_prints_nothing(self, runner, env):
        result = runner.invoke(bt, ["args", "--docker"], env=env)

        assert result.exit_code == 0
        assert result.output == ""

    @pytest.mark.parametrize("flag", ["--docker", "--pack"])
    def test_args(self, runner, env, bindings_root, flag):
        runner.invoke(bt, ["add", "-t", "binding", "-p", "k=v"], env=env)

        result = runner.invoke(bt, ["args", flag], env=env)

        assert result.exit_code == 0
        assert result.output.strip() == (
            f"--volume {bindings_root}:/bindings --env SERVICE_BINDING_ROOT=/bindings"
        )

    @pytest.mark.parametrize("flags", [[], ["--docker", "--pack"]])
    def test_args_requires_one_flag(self, runner, env, flags):
        result = runner.invoke(bt, ["args"] + flags, env=env)
        assert result.exit_code == 2
