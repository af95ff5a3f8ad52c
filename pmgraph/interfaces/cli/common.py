"""Shared utilities for PMGraph CLI commands.

- Formatted output helpers (error, success, info, warning)
- Separators and headers
- Node and edge formatting for display
"""

import typer

from pmgraph.domain.graph import DerivedEdge, GroupNode, Node


def print_error(msg: str) -> None:
    """Print a formatted error message to stderr."""
    typer.echo(typer.style(f"Error: {msg}", fg=typer.colors.RED), err=True)


def print_success(msg: str) -> None:
    typer.echo(typer.style(msg, fg=typer.colors.GREEN))


def print_info(msg: str) -> None:
    typer.echo(typer.style(msg, fg=typer.colors.BLUE))


def print_warning(msg: str) -> None:
    typer.echo(typer.style(f"Warning: {msg}", fg=typer.colors.YELLOW), err=True)


def print_separator(char: str = "=", width: int = 60) -> None:
    typer.echo(char * width)


def print_header(title: str, width: int = 60) -> None:
    """Print a title between two separator lines."""
    print_separator("=", width)
    typer.echo(title)
    print_separator("=", width)


def format_node(node: Node, names: dict[str, str]) -> str:
    """One-line description of a node.

    Args:
        node: Node to describe
        names: Node id -> display name (script alias or title)
    """
    if isinstance(node, GroupNode):
        state = "collapsed" if node.data.collapsed else "expanded"
        return f"[group] {names.get(node.id, node.data.title)} ({state})"

    parts = [f"[task] {names.get(node.id, node.data.title)}", node.data.priority.value]
    if node.data.department:
        parts.append(node.data.department)
    if node.data.status:
        parts.append(node.data.status.value)
    if node.parent_id:
        parent = names.get(node.parent_id, node.parent_id)
        parts.append(f"in {parent}{' (hidden)' if node.hidden else ''}")
    return " | ".join(parts)


def format_edge(edge: DerivedEdge, names: dict[str, str]) -> str:
    """One-line description of a derived edge, with its count badge."""
    source = names.get(edge.source, edge.source)
    target = names.get(edge.target, edge.target)
    line = f"{source} -> {target} [{edge.edge_type.value}]"
    if edge.show_badge:
        line += f" x{edge.count}"
    if edge.synthetic:
        line += " (synthetic)"
    if edge.opacity < 1.0:
        line += f" (dimmed {edge.opacity})"
    return line
