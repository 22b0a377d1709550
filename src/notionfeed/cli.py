"""CLI entry point for notionfeed."""

import asyncio
import os
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from notionfeed import __version__
from notionfeed.config import DEFAULT_CONFIG_PATH, ConfigManager
from notionfeed.feed.catalog import build_tree
from notionfeed.feed.loader import FeedLoader, FeedSnapshot
from notionfeed.models.board import BoardKind, BoardNode
from notionfeed.models.content import ContentItem, GroupedItem
from notionfeed.services.exceptions import NotionAPIError
from notionfeed.services.notion_client import NotionClient
from notionfeed.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)
console = Console()

_KIND_LABELS = {
    BoardKind.TOGGLE: "▸",
    BoardKind.PAGE: "□",
    BoardKind.DATABASE: "▤",
}


def describe_item(item: ContentItem) -> str:
    """One-line plain description of a content item."""
    if item.kind == "heading":
        return f"{'#' * (item.metadata.level or 1)} {item.content}"
    if item.kind == "numbered_list":
        return f"{item.metadata.number}. {item.content}"
    if item.kind == "bulleted_list":
        return f"• {item.content}"
    if item.kind == "todo":
        return f"[{'x' if item.metadata.checked else ' '}] {item.content}"
    if item.kind == "quote":
        return f"> {item.content}"
    if item.kind == "callout":
        return f"{item.metadata.icon or '!'} {item.content}"
    if item.kind == "text":
        return item.content or ""
    if item.kind == "file":
        return f"[file] {item.metadata.file_name} <{item.url}>"
    if item.kind in ("youtube", "loom"):
        return f"[{item.kind}] {item.metadata.video_id}"
    if item.kind == "canva":
        return f"[canva] {item.metadata.embed_url}"
    if item.kind == "title":
        if item.metadata.parent_title:
            return f"== {item.metadata.parent_title} / {item.content} =="
        return f"== {item.content} =="
    return f"[{item.kind}] {item.url or item.content or ''}"


def describe_entry(entry: GroupedItem) -> list[str]:
    """Lines describing one card of the feed."""
    if entry.is_group:
        return [describe_item(member) for member in entry.group_items or []]
    return [describe_item(entry)]


def render_tree(nodes: list[BoardNode], label: str) -> Tree:
    """Build a rich Tree for the navigation forest."""
    tree = Tree(label)

    def add(parent: Tree, node: BoardNode) -> None:
        board = node.board
        marker = _KIND_LABELS.get(board.kind, "")
        text = f"{escape(board.icon or marker)} {escape(board.title)} [dim]{escape(board.id)}[/dim]"
        branch = parent.add(text)
        for child in node.children:
            add(branch, child)

    for node in nodes:
        add(tree, node)
    return tree


def print_feed(snapshot: FeedSnapshot) -> None:
    if not snapshot.groups:
        console.print("[dim]No content.[/dim]")
        return
    for index, entry in enumerate(snapshot.groups, start=1):
        lines = describe_entry(entry)
        console.print(f"[bold cyan]{index:>3}[/bold cyan] {escape(lines[0])}", highlight=False)
        for line in lines[1:]:
            console.print(f"    {line}", markup=False, highlight=False)


def _load_config(ctx: click.Context) -> ConfigManager:
    config_path: Optional[Path] = ctx.obj.get("config_path")
    try:
        return ConfigManager.load_from_path(config_path or DEFAULT_CONFIG_PATH)
    except (FileNotFoundError, PermissionError, ValueError) as e:
        raise click.ClickException(str(e)) from e


def _make_loader(config_mgr: ConfigManager) -> tuple[NotionClient, FeedLoader]:
    notion = config_mgr.notion
    client = NotionClient(notion, cache_ttl=config_mgr.cache.ttl_seconds)
    loader = FeedLoader(
        client,
        root_page_id=notion.root_page_id,
        root_title=config_mgr.feed.root_title,
        show_database_names=config_mgr.feed.show_database_names,
        icon_batch_size=config_mgr.feed.icon_batch_size,
    )
    return client, loader


@click.group(invoke_without_command=True)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (default: ~/.config/notionfeed/config.yaml)",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.option("--version", is_flag=True, help="Show version and exit")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool, version: bool):
    """notionfeed - Browse a Notion page tree as a card feed."""
    if version:
        click.echo(f"notionfeed v{__version__}")
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)

    if verbose:
        os.environ["NOTIONFEED_LOG_LEVEL"] = "DEBUG"
    configure_logging()

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.option("--refresh", is_flag=True, help="Bypass the response cache")
@click.pass_context
def boards(ctx: click.Context, refresh: bool):
    """Show the navigation tree of boards."""
    config_mgr = _load_config(ctx)

    async def run() -> FeedLoader:
        client, loader = _make_loader(config_mgr)
        async with client:
            await loader.load_root(force_refresh=refresh)
        return loader

    try:
        loader = asyncio.run(run())
    except NotionAPIError as e:
        raise click.ClickException(str(e)) from e

    nodes = build_tree(loader.boards, show_database_names=config_mgr.feed.show_database_names)
    console.print(render_tree(nodes, config_mgr.feed.root_title))


@cli.command()
@click.argument("board_id", required=False)
@click.option("--refresh", is_flag=True, help="Bypass the response cache")
@click.pass_context
def feed(ctx: click.Context, board_id: Optional[str], refresh: bool):
    """Show the grouped cards of the root page or of BOARD_ID."""
    config_mgr = _load_config(ctx)

    async def run() -> FeedSnapshot:
        client, loader = _make_loader(config_mgr)
        async with client:
            snapshot = await loader.load_root(force_refresh=refresh)
            if board_id:
                snapshot = await loader.load_board(board_id, force_refresh=refresh)
        return snapshot

    try:
        snapshot = asyncio.run(run())
    except NotionAPIError as e:
        raise click.ClickException(str(e)) from e

    print_feed(snapshot)


@cli.command("add-toggle")
@click.argument("parent_id")
@click.argument("title")
@click.pass_context
def add_toggle(ctx: click.Context, parent_id: str, title: str):
    """Append a new toggle section titled TITLE to PARENT_ID."""
    config_mgr = _load_config(ctx)

    async def run():
        async with NotionClient(config_mgr.notion) as client:
            return await client.create_toggle(parent_id, title)

    try:
        board = asyncio.run(run())
    except NotionAPIError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Created toggle {board.title!r} ({board.id})")


def main():
    """Entry point for the notionfeed command."""
    cli(obj={})


if __name__ == "__main__":
    main()
