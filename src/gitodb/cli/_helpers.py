"""Shared helpers, option decorators, and the main CLI group."""

from __future__ import annotations

import logging

import click

from ..exceptions import GitObjectError
from ..objects import GitObject
from ..repo import Repository


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _store_repo(ctx, param, value):
    """Click callback: store --repo value in the context."""
    ctx.ensure_object(dict)
    if value is not None:
        ctx.obj["repo_path"] = value
    return value


def _repo_option(f):
    """Shared --repo/-r option decorator for all commands."""
    return click.option(
        "--repo", "-r", type=click.Path(), envvar="GITODB_REPO",
        help="Path to the git directory (or set GITODB_REPO).",
        expose_value=False, callback=_store_repo, is_eager=True,
    )(f)


def _require_repo(ctx) -> str:
    """Get the repo path from context, raising a clear error if missing."""
    repo = ctx.obj.get("repo_path")
    if not repo:
        raise click.ClickException(
            "No repository specified. Use --repo or set GITODB_REPO."
        )
    return repo


def _open_repo(repo_path: str) -> Repository:
    try:
        return Repository.open(repo_path)
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc))


def _load(ctx, sha: str) -> GitObject:
    """Open the context's repository and load *sha*, mapping errors to Click."""
    repo = _open_repo(_require_repo(ctx))
    try:
        obj = repo.get_object(sha)
    except GitObjectError as exc:
        raise click.ClickException(str(exc))
    _status(ctx, f"Loaded {obj.type_name} {obj.id}")
    return obj


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--repo", "-r", type=click.Path(), envvar="GITODB_REPO",
              help="Path to the git directory (or set GITODB_REPO).",
              expose_value=False, callback=_store_repo, is_eager=True)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.pass_context
def main(ctx, verbose):
    """gitodb — read objects from a git repository.

    \b
    Quick start:
      gitodb type -r repo.git <sha>
      gitodb show -r repo.git <sha>
      gitodb cat  -r repo.git <sha> > out.bin

    Only loose objects can be read; packed objects are listed by
    `gitodb packs` but not looked up.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
