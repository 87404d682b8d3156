"""gqlallow CLI — manage a GraphQL allow-list on disk.

Commands:
    gqlallow init [NAME]              create allowlist.toml + store dirs
    gqlallow add FILE                 submit a GraphQL document
    gqlallow list                     list allow-listed operations
    gqlallow show NAME                dump one record as YAML
    gqlallow fragment NAME            print a fragment body
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO

import click

from gqlallow.codecs import dump_item
from gqlallow.config import AllowListConfig, init_config, load_config
from gqlallow.errors import AllowListError
from gqlallow.models import Metadata, Order
from gqlallow.store import AllowList, SaveResult

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg() -> AllowListConfig:
    try:
        cfg = load_config()
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc
    logging.basicConfig(level=cfg.logging.level, format=cfg.logging.format)
    return cfg


def _open_store(cfg: AllowListConfig, **kwargs: object) -> AllowList:
    try:
        return AllowList.open(cfg, **kwargs)
    except (OSError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="gqlallow")
def cli() -> None:
    """gqlallow — GraphQL operation allow-list."""


# ---------------------------------------------------------------------------
# gqlallow init
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("name", required=False)
@click.option("--dir", "root", default=".", show_default=True, help="Project root")
def init(name: str | None, root: str) -> None:
    """Create allowlist.toml and the store directories."""
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path, name=name)
        click.echo(f"Created {config_path}")
    except FileExistsError:
        click.echo("allowlist.toml already exists — skipping init")

    cfg = load_config(root_path)
    cfg.ensure_dirs()
    click.echo(f"Queries   : {cfg.queries_dir}")
    click.echo(f"Fragments : {cfg.fragments_dir}")


# ---------------------------------------------------------------------------
# gqlallow add
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("file", type=click.File("r"))
@click.option("--vars", "vars_file", type=click.File("r"), default=None, help="Variables JSON file")
@click.option("--namespace", "-n", default="", help="Namespace prefix")
@click.option("--order-var", default="", help="Variable iterated by the gateway")
@click.option("--order-value", "order_values", multiple=True, help="Value for --order-var (repeatable)")
def add(
    file: IO[str],
    vars_file: IO[str] | None,
    namespace: str,
    order_var: str,
    order_values: tuple[str, ...],
) -> None:
    """Submit the GraphQL document in FILE ('-' for stdin)."""
    cfg = _load_cfg()
    results: list[SaveResult] = []
    store = _open_store(cfg, on_result=results.append)
    md = Metadata(order=Order(var=order_var, values=list(order_values)))
    try:
        store.set(vars_file.read() if vars_file else None, file.read(), md, namespace)
    except AllowListError as exc:
        raise click.ClickException(str(exc)) from exc
    finally:
        store.close()

    for r in results:
        if not r.ok:
            raise click.ClickException(f"not saved: {r.error}")
        click.echo(r.path)


# ---------------------------------------------------------------------------
# gqlallow list
# ---------------------------------------------------------------------------


@cli.command("list")
@click.option("--namespace", "-n", default=None, help="Only this namespace")
def list_cmd(namespace: str | None) -> None:
    """List allow-listed operations."""
    from rich.console import Console
    from rich.table import Table

    cfg = _load_cfg()
    store = AllowList.open_read_only(cfg.filesystem(), cfg.store_dir.as_posix())
    try:
        items = store.load()
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc
    if namespace is not None:
        items = [i for i in items if i.namespace == namespace]

    table = Table(title=f"allow list — {cfg.name}", show_header=True, header_style="bold")
    table.add_column("Namespace", style="dim", no_wrap=True)
    table.add_column("Name", no_wrap=True)
    table.add_column("Vars", justify="center")
    table.add_column("Comment")
    for item in items:
        table.add_row(
            item.namespace,
            item.name,
            "✓" if item.vars else "",
            item.comment.splitlines()[0] if item.comment else "",
        )
    Console().print(table)
    click.echo(f"{len(items)} operation(s)")


# ---------------------------------------------------------------------------
# gqlallow show / fragment
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("name")
@click.option("--namespace", "-n", default="", help="Namespace prefix")
def show(name: str, namespace: str) -> None:
    """Print the record for NAME as YAML."""
    cfg = _load_cfg()
    store = AllowList.open_read_only(cfg.filesystem(), cfg.store_dir.as_posix())
    try:
        item = store.get_by_name(namespace, name)
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc
    if item is None:
        raise click.ClickException(f"not in allow list: {name}")
    click.echo(dump_item(item), nl=False)


@cli.command()
@click.argument("name")
@click.option("--namespace", "-n", default="", help="Namespace prefix")
def fragment(name: str, namespace: str) -> None:
    """Print the body of fragment NAME."""
    cfg = _load_cfg()
    store = AllowList.open_read_only(cfg.filesystem(), cfg.store_dir.as_posix())
    try:
        click.echo(store.fragment_fetcher(namespace)(name))
    except FileNotFoundError as exc:
        raise click.ClickException(f"no such fragment: {name}") from exc
