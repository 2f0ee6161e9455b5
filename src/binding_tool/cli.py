"""bt: generate Kubernetes service bindings for use with Cloud Native Buildpacks.

Bindings are written under SERVICE_BINDING_ROOT (default: ./bindings) as

\b
    <root>/<name>/type
    <root>/<name>/<key>
"""

import functools
import logging

import click

from binding_tool.binding_tool_exceptions import BindingToolException
from binding_tool.binding_tool_logger import BindingToolLogger
from binding_tool.binding_tool_settings import BindingToolSettings
from binding_tool.bindings import BindingStore, ConfirmationPolicy
from binding_tool.dependency_mapping import DEPENDENCY_MAPPING_TYPE, DependencyMapper

FORCE_HELP = "force update if key exists"


def _reports_errors(func):
    """Turn binding-tool errors into a click error (exit status 1)."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BindingToolException as e:
            raise click.ClickException(str(e)) from e

    return wrapper


@click.group(help=__doc__)
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr")
@click.pass_context
@_reports_errors
def bt(ctx: click.Context, verbose: bool) -> None:
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)
    ctx.obj = BindingToolSettings.from_env()


@bt.command("add")
@click.option("--name", "-n", help="optional name for the binding, name defaults to the type")
@click.option("--type", "-t", "binding_type", required=True, help="type of binding")
@click.option(
    "--param", "-p", "params", multiple=True, required=True, metavar="key=val",
    help="key/value to set for the type, `key=@path` copies the file at path",
)
@click.option("--force", "-f", is_flag=True, help=FORCE_HELP)
@click.pass_obj
@_reports_errors
def add(config, name, binding_type, params, force) -> None:
    """Add or modify a binding."""
    store = BindingStore(config.bindings_root, ConfirmationPolicy.from_force(force), BindingToolLogger())
    store.add_all(binding_type, name, list(params))


@bt.command("delete")
@click.option("--name", "-n", required=True, help="name for the binding")
@click.option("--key", "-k", "keys", multiple=True, help="specific key to delete")
@click.option("--force", "-f", is_flag=True, help="delete without asking for confirmation")
@click.pass_obj
@_reports_errors
def delete(config, name, keys, force) -> None:
    """Delete a binding, or only some of its keys."""
    store = BindingStore(config.bindings_root, ConfirmationPolicy.from_force(force), BindingToolLogger())
    store.delete_keys(name, list(keys))


@bt.command("ca-certs")
@click.option("--name", "-n", help="optional name for the binding, name defaults to the type")
@click.option("--cert", "-c", "certs", multiple=True, required=True, help="path to a CA certificate to add")
@click.option("--force", "-f", is_flag=True, help=FORCE_HELP)
@click.pass_obj
@_reports_errors
def ca_certs(config, name, certs, force) -> None:
    """Convenience for adding `ca-certificates` bindings."""
    store = BindingStore(config.bindings_root, ConfirmationPolicy.from_force(force), BindingToolLogger())
    store.add_ca_certificates(list(certs), name)


@bt.command("dependency-mapping")
@click.option("--name", "-n", help="optional name for the binding, name defaults to the type")
@click.option("--toml", "-t", "toml_path", help="path to local buildpack.toml file with metadata dependencies")
@click.option(
    "--buildpack", "-b",
    help="buildpack ID and optional version from which dependencies will be loaded, "
    "e.g. `paketo-buildpacks/bellsoft-liberica@v9.0.0`",
)
@click.option("--force", "-f", is_flag=True, help=FORCE_HELP)
@click.pass_obj
@_reports_errors
def dependency_mapping(config, name, toml_path, buildpack, force) -> None:
    """Convenience for adding `dependency-mapping` bindings."""
    if (toml_path is None) == (buildpack is None):
        raise click.UsageError("exactly one of --toml or --buildpack is required")

    mapper = DependencyMapper(config, ConfirmationPolicy.from_force(force), BindingToolLogger())
    deps = mapper.run(toml_path=toml_path, buildpack=buildpack, binding_name=name)
    click.echo(f"Mapped {len(deps)} dependencies into binding `{name or DEPENDENCY_MAPPING_TYPE}`")


@bt.command("args")
@click.option("--docker", "-d", is_flag=True, help="generates binding args for `docker run`")
@click.option("--pack", "-p", is_flag=True, help="generates binding args for `pack build`")
@click.pass_obj
def args(config, docker, pack) -> None:
    """Print the volume and env arguments that expose the bindings to a container."""
    if docker == pack:
        raise click.UsageError("exactly one of --docker or --pack is required")

    store = BindingStore(config.bindings_root, ConfirmationPolicy.NEVER, BindingToolLogger())
    if not store.list_bindings():
        return
    click.echo(f"--volume {config.bindings_root}:/bindings --env SERVICE_BINDING_ROOT=/bindings")


def main() -> None:
    bt()


if __name__ == "__main__":
    main()
