"""CLI entry point for Outlinemap."""

import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from heading_outline.mutator import delete_subtree, insert_child
from heading_outline.navigator import find_by_id, subtree_line_range
from heading_outline.parser import ROOT_ID, HeadingNode, HeadingOutline
from outlinemap.config import ConfigManager
from outlinemap.layout.graph import flatten
from outlinemap.layout.simulation import ForceSimulation
from outlinemap.layout.style import label_style
from outlinemap.services.exceptions import DocumentReadError, FileModifiedError
from outlinemap.services.file_monitor import FileMonitor
from outlinemap.services.file_operations import atomic_write, load_document
from outlinemap.utils.logging import bind_document, configure_logging, get_logger


logger = get_logger(__name__)
console = Console()


def load_config(ctx: click.Context) -> ConfigManager:
    """
    Load configuration from --config, or ~/.config/outlinemap/config.yaml.

    Raises:
        click.ClickException: If the config file is missing or invalid
    """
    path = ctx.obj.get("config_path")
    try:
        return ConfigManager.load(path)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))
    except ValueError as e:
        raise click.ClickException(str(e))


def read_document(path: Path, file_monitor: Optional[FileMonitor] = None) -> str:
    try:
        return load_document(path, file_monitor)
    except (DocumentReadError, OSError) as e:
        logger.error("document_load_error", path=str(path), error=str(e))
        raise click.ClickException(f"Cannot read {path}: {e}")


def read_outline(path: Path, file_monitor: Optional[FileMonitor] = None) -> HeadingOutline:
    return HeadingOutline.parse(read_document(path, file_monitor))


def write_buffer(path: Path, text: str, file_monitor: FileMonitor) -> None:
    try:
        atomic_write(path, text, file_monitor)
    except FileModifiedError as e:
        raise click.ClickException(f"{path} changed while it was being updated: {e}")
    except OSError as e:
        raise click.ClickException(f"Cannot write {path}: {e}")


def build_tree(node: HeadingNode, branch: Tree) -> None:
    for child in node.children:
        label = f"[{label_style(child.level)}]{escape(child.text)}[/] [dim]{child.id}[/]"
        build_tree(child, branch.add(label))


@click.group()
@click.version_option(version="0.1.0", prog_name="outlinemap")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (default: ~/.config/outlinemap/config.yaml)",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """Outlinemap: edit a markdown document next to a live mind map of its headings."""
    configure_logging(verbose=verbose)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _launch(ctx: click.Context, path: Path, read_only: bool) -> None:
    from outlinemap.tui.app import OutlineMapApp

    bind_document(path)
    config = load_config(ctx)
    file_monitor = FileMonitor()
    text = read_document(path, file_monitor)

    logger.info("launching_tui", path=str(path), read_only=read_only)
    app = OutlineMapApp(
        text,
        config=config.config,
        document_path=path,
        read_only=read_only,
        file_monitor=file_monitor,
    )
    app.run()
    logger.info("tui_closed", path=str(path))


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--read-only", is_flag=True, help="Open without allowing edits")
@click.pass_context
def edit(ctx: click.Context, path: Path, read_only: bool):
    """
    Open PATH in the editor with its mind map.

    A PATH that does not exist yet is created on first save.
    """
    _launch(ctx, path, read_only)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def view(ctx: click.Context, path: Path):
    """Open PATH read-only."""
    _launch(ctx, path, read_only=True)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def tree(path: Path):
    """Print the heading tree of PATH."""
    outline = read_outline(path)
    root = Tree(f"[bold]{escape(path.name)}[/]")
    build_tree(outline.root, root)
    console.print(root)


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("text")
@click.option(
    "--parent",
    "parent_id",
    default=ROOT_ID,
    show_default=True,
    help="Id of the heading to add under (see `outlinemap tree`)",
)
def add(path: Path, text: str, parent_id: str):
    """
    Add a heading with TEXT under a parent heading.

    Examples:
        outlinemap add notes.md "Ideas"                      # new top-level topic
        outlinemap add notes.md "Follow up" --parent heading-4
    """
    bind_document(path)
    file_monitor = FileMonitor()
    outline = read_outline(path, file_monitor)

    parent = find_by_id(outline.root, parent_id)
    if parent is None:
        raise click.ClickException(f"No heading with id '{parent_id}'")
    if not text.strip():
        raise click.ClickException("Heading text must not be blank")

    new_text = insert_child(outline, parent_id, text)
    write_buffer(path, new_text, file_monitor)
    logger.info("child_inserted", path=str(path), parent_id=parent_id)
    click.echo(f"Added '{text.strip()}' under {parent.text}")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("node_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def delete(path: Path, node_id: str, yes: bool):
    """Delete the heading NODE_ID of PATH and everything under it."""
    bind_document(path)
    file_monitor = FileMonitor()
    outline = read_outline(path, file_monitor)

    node = find_by_id(outline.root, node_id)
    if node is None:
        raise click.ClickException(f"No heading with id '{node_id}'")
    if node.is_root:
        raise click.ClickException("The root cannot be deleted")

    start, end = subtree_line_range(node, outline.lines)
    if not yes:
        click.confirm(f"Delete '{node.text}' and {end - start - 1} line(s) under it?", abort=True)

    new_text = delete_subtree(outline, node_id)
    write_buffer(path, new_text, file_monitor)
    logger.info("subtree_deleted", path=str(path), node_id=node_id)
    click.echo(f"Deleted '{node.text}'")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--ticks", type=click.IntRange(min=1), default=None, help="Stop after N ticks")
@click.pass_context
def layout(ctx: click.Context, path: Path, ticks: Optional[int]):
    """Run the force layout for PATH headlessly and print node positions as JSON."""
    config = load_config(ctx)
    outline = read_outline(path)

    nodes, links = flatten(outline.root)
    simulation = ForceSimulation(nodes, links, config.simulation)
    performed = simulation.run(ticks)

    result = {
        "ticks": performed,
        "settled": simulation.settled,
        "nodes": [
            {
                "id": node.id,
                "text": node.text,
                "level": node.level,
                "x": round(float(simulation.positions[node.index, 0]), 3),
                "y": round(float(simulation.positions[node.index, 1]), 3),
            }
            for node in nodes
        ],
        "links": [
            {"source": nodes[link.source].id, "target": nodes[link.target].id} for link in links
        ],
    }
    click.echo(json.dumps(result, indent=2))


def main():
    """Main entry point for setuptools console script."""
    cli()


if __name__ == "__main__":
    main()
