#!/usr/bin/env python3
"""Sort an OpenAPI document by tag order.

Reorders paths by the earliest tag of their operations, operations within
each path by tag then method, and the tags array itself (declared tags in
use, in declared order). Undeclared tags sort alphabetically after the
declared ones; untagged operations go last.

Usage:
    python -m refnav.sort_tags openapi.json                  # overwrite input
    python -m refnav.sort_tags openapi.json sorted.json      # separate output
    python -m refnav.sort_tags -i openapi.json -o sorted.json --pretty
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.console import Console

from refnav.utils import (
    DocumentReorderer,
    PathConfig,
    SpecLoadError,
    TagAudit,
    TagRanker,
    TagValidationError,
    load_config,
    load_spec,
    save_spec,
)

console = Console()


def sort_file(
    input_path: Path,
    output_path: Path,
    config: dict,
    pretty: bool = False,
) -> tuple[DocumentReorderer, TagAudit]:
    """Read, sort and write a single document.

    Returns:
        Tuple of (reorderer, for its statistics; tag audit of the input).
    """
    ordering = config.get("ordering", {})
    ranker = TagRanker(strict=ordering.get("strict", False))
    reorderer = DocumentReorderer(ranker)

    document = load_spec(input_path)
    audit = ranker.audit(document)
    sorted_doc = reorderer.reorder(document)

    output_config = config.get("output", {})
    indent = output_config.get("json_indent", 2) if pretty else None
    save_spec(sorted_doc, output_path, indent=indent)
    return reorderer, audit


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refnav-sort-tags",
        description="Sort an OpenAPI document's paths, operations and tags by tag order",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", nargs="?", type=Path, help="Input OpenAPI JSON file")
    parser.add_argument("output", nargs="?", type=Path, help="Output file (defaults to input)")
    parser.add_argument(
        "-i",
        "--in",
        "--input",
        dest="input_opt",
        type=Path,
        help="Input OpenAPI JSON file",
    )
    parser.add_argument(
        "-o",
        "--out",
        "--output",
        dest="output_opt",
        type=Path,
        help="Output file (defaults to overwriting the input)",
    )
    parser.add_argument(
        "-p",
        "--pretty",
        action="store_true",
        help="Pretty-print JSON",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--paths-config",
        type=Path,
        help="Path to paths configuration file",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when declared and used tags disagree",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    input_arg = args.input_opt or args.input
    if input_arg is None:
        console.print("[red]Missing input file.[/red]")
        parser.print_usage()
        return 1

    paths = PathConfig(args.paths_config)
    config = load_config(args.config or paths.refnav_config)
    if args.strict:
        config["ordering"]["strict"] = True
    pretty = args.pretty or config["output"].get("pretty", False)

    input_path = input_arg.resolve()
    output_path = (args.output_opt or args.output or input_arg).resolve()

    try:
        reorderer, audit = sort_file(input_path, output_path, config, pretty=pretty)
    except (SpecLoadError, TagValidationError, OSError) as e:
        console.print(f"[red]{e}[/red]")
        return 1

    if audit.undeclared_used:
        console.print(f"[yellow]Undeclared tags: {', '.join(audit.undeclared_used)}[/yellow]")
    if audit.declared_unused:
        console.print(f"[yellow]Dropped unused tags: {', '.join(audit.declared_unused)}[/yellow]")

    stats = reorderer.get_stats()
    console.print(
        f"[dim]{stats['paths_processed']} paths, {stats['paths_moved']} moved, "
        f"{stats['operations_moved']} operations moved, "
        f"{stats['tags_dropped']} tags dropped[/dim]",
    )
    if output_path == input_path:
        console.print(f"[green]Sorted tags written back to: {input_path}[/green]")
    else:
        console.print(f"[green]Sorted tags written to: {output_path}[/green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
