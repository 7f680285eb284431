"""Object inspection commands: type, size, cat, show, packs."""

from __future__ import annotations

import sys

import click

from ..objects import Blob, Commit, Tag, Tree
from ._helpers import (
    main,
    _load,
    _open_repo,
    _repo_option,
    _require_repo,
    _status,
)


def _format_date(when) -> str:
    return when.strftime("%a %b %d %H:%M:%S %Y %z")


@main.command("type")
@_repo_option
@click.argument("sha")
@click.pass_context
def type_(ctx, sha):
    """Print the type of object SHA."""
    click.echo(_load(ctx, sha).type_name)


@main.command()
@_repo_option
@click.argument("sha")
@click.pass_context
def size(ctx, sha):
    """Print the payload size of object SHA in bytes."""
    click.echo(len(_load(ctx, sha).stored_payload))


@main.command()
@_repo_option
@click.argument("sha")
@click.pass_context
def cat(ctx, sha):
    """Write the raw payload of object SHA to stdout."""
    obj = _load(ctx, sha)
    sys.stdout.buffer.write(obj.stored_payload)


@main.command()
@_repo_option
@click.argument("sha")
@click.pass_context
def show(ctx, sha):
    """Show object SHA in human-readable form."""
    obj = _load(ctx, sha)
    if isinstance(obj, Blob):
        click.echo(obj.data.decode("utf-8", "replace"), nl=False)
    elif isinstance(obj, Tree):
        for entry in obj:
            kind = "tree" if entry.is_tree else "blob"
            click.echo(f"{entry.mode:06o} {kind} {entry.id}\t{entry.name}")
    elif isinstance(obj, Commit):
        click.echo(f"commit {obj.id}")
        click.echo(f"tree {obj.tree_id}")
        for parent in obj.parent_ids:
            click.echo(f"parent {parent}")
        click.echo(f"Author: {obj.author}")
        click.echo(f"Date:   {_format_date(obj.author_date)}")
        click.echo()
        for line in obj.message.rstrip("\n").splitlines():
            click.echo(f"    {line}")
    elif isinstance(obj, Tag):
        if obj.is_annotated:
            click.echo(f"tag {obj.name}")
            click.echo(f"Tagger: {obj.tagger}")
            click.echo(f"Date:   {_format_date(obj.tag_date)}")
            click.echo()
            click.echo(obj.message)
            click.echo()
        else:
            click.echo("lightweight tag")
        click.echo(f"{obj.target_type} {obj.object_id}")


@main.command()
@_repo_option
@click.pass_context
def packs(ctx):
    """List pack files found in the repository."""
    repo = _open_repo(_require_repo(ctx))
    for pack in repo.storage.packs:
        click.echo(pack.name)
    _status(ctx, f"{len(repo.storage.packs)} pack(s)")
