#!/usr/bin/env python3
"""Generate the API reference navigation and introduction pages.

Sorts the OpenAPI document by tag order, groups every operation under its
primary tag, and writes:

    <out>/
        ├── navigation.json         (reference navigation descriptor)
        ├── <group-slug>/index.mdx  (introduction page, created once)
        └── ...

Introduction pages are a one-time scaffold: existing files are never
overwritten, so they can be edited by hand.

Usage:
    python -m refnav.gen_ref_pages api-reference/openapi.json
    python -m refnav.gen_ref_pages -i openapi.json -o api-reference --update-docs docs.json
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from refnav.utils import (
    DocumentReorderer,
    NavigationContainerError,
    PathConfig,
    ReferenceTreeBuilder,
    SpecLoadError,
    TagRanker,
    TagValidationError,
    load_config,
    load_spec,
    save_spec,
    update_docs_config_file,
)

console = Console()


@dataclass
class RunStats:
    """Statistics for a reference generation run."""

    paths: int = 0
    operations: int = 0
    groups: int = 0
    intro_pages_created: int = 0
    intro_pages_skipped: int = 0
    intro_pages_failed: int = 0
    undeclared_tags: list[str] = field(default_factory=list)
    unused_tags: list[str] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "paths": self.paths,
            "operations": self.operations,
            "groups": self.groups,
            "intro_pages_created": self.intro_pages_created,
            "intro_pages_skipped": self.intro_pages_skipped,
            "intro_pages_failed": self.intro_pages_failed,
            "undeclared_tags": self.undeclared_tags,
            "unused_tags": self.unused_tags,
        }


def generate_reference(
    openapi_path: Path,
    out_dir: Path,
    config: dict,
    docs_config: Path | None = None,
    dry_run: bool = False,
) -> RunStats:
    """Build navigation and introduction pages for one OpenAPI document.

    Args:
        openapi_path: OpenAPI JSON file.
        out_dir: Directory receiving navigation file and introduction pages.
        config: Tool configuration (see config/refnav.yaml).
        docs_config: Optional docs site config to splice the navigation into.
        dry_run: Build everything in memory without writing.

    Returns:
        RunStats with processing summary.

    Raises:
        SpecLoadError: If the OpenAPI document or docs config cannot be parsed.
        NavigationContainerError: If docs_config lacks the navigation tab.
        TagValidationError: In strict mode, on tag mismatches.
    """
    stats = RunStats()
    nav_config = config.get("navigation", {})
    ranker = TagRanker(strict=config.get("ordering", {}).get("strict", False))
    reorderer = DocumentReorderer(ranker)
    builder = ReferenceTreeBuilder(nav_config)

    document = load_spec(openapi_path)
    audit = ranker.audit(document)
    stats.undeclared_tags = audit.undeclared_used
    stats.unused_tags = audit.declared_unused

    canonical = reorderer.reorder(document)
    # Seed from the rewritten tag list so unused declarations get no group
    descriptor, entries = builder.build_navigation(
        canonical,
        declared_tags=canonical.get("tags"),
        source_path=openapi_path,
    )

    stats.paths = len(canonical.get("paths") or {})
    stats.groups = len(entries)
    # Each group leads with its introduction reference
    stats.operations = sum(len(entry.pages) - 1 for entry in entries)

    if dry_run:
        console.print(f"[yellow]Would write {len(entries)} groups to {out_dir}[/yellow]")
        return stats

    if docs_config is not None:
        # Fails before any write when the container is missing
        update_docs_config_file(
            docs_config,
            descriptor,
            config.get("docs", {}).get("tab", "API Reference"),
        )
        console.print(f"[green]Updated navigation in {docs_config}[/green]")

    out_dir.mkdir(parents=True, exist_ok=True)
    result = builder.scaffold_intro_pages(out_dir, entries)
    stats.intro_pages_created = len(result.created)
    stats.intro_pages_skipped = len(result.skipped)
    stats.intro_pages_failed = len(result.failed)
    stats.errors.extend(result.failed)
    for path in result.created:
        console.print(f"[dim]Created {path}[/dim]")

    nav_path = out_dir / nav_config.get("navigation_file", "navigation.json")
    save_spec(descriptor, nav_path, indent=config.get("output", {}).get("json_indent", 2))
    console.print(f"[green]Wrote {nav_path}[/green]")

    return stats


def print_summary(stats: RunStats) -> None:
    """Print run summary to console."""
    table = Table(title="Reference Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Paths", str(stats.paths))
    table.add_row("Operations", str(stats.operations))
    table.add_row("Groups", str(stats.groups))
    table.add_row("Intro Pages Created", str(stats.intro_pages_created))
    table.add_row("Intro Pages Kept", str(stats.intro_pages_skipped))
    table.add_row("Intro Pages Failed", str(stats.intro_pages_failed))
    if stats.undeclared_tags:
        table.add_row("Undeclared Tags", ", ".join(stats.undeclared_tags))
    if stats.unused_tags:
        table.add_row("Unused Declared Tags", ", ".join(stats.unused_tags))

    console.print(table)

    if stats.errors:
        console.print(f"\n[red]Errors ({len(stats.errors)}):[/red]")
        for error in stats.errors[:10]:
            console.print(f"  - {error['group']} ({error['path']}): {error['error'][:100]}")
        if len(stats.errors) > 10:
            console.print(f"  ... and {len(stats.errors) - 10} more errors")


def generate_report(stats: RunStats, output_path: Path) -> None:
    """Generate reference generation report."""
    report = {
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        "summary": stats.to_dict(),
        "errors": stats.errors,
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w") as f:
        json.dump(report, f, indent=2)
        f.write("\n")

    console.print(f"[green]Report saved to {output_path}[/green]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refnav-ref-pages",
        description="Generate reference navigation and per-tag introduction pages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Generates: <out>/navigation.json plus one <group-slug>/index.mdx per tag.
Existing introduction pages are left untouched.
        """,
    )
    parser.add_argument("openapi", nargs="?", type=Path, help="OpenAPI JSON file")
    parser.add_argument("out", nargs="?", type=Path, help="Output directory")
    parser.add_argument("-i", "--openapi", dest="openapi_opt", type=Path, help="OpenAPI JSON file")
    parser.add_argument(
        "-o",
        "--out",
        dest="out_opt",
        type=Path,
        help=(
            "Output directory (default: directory of the OpenAPI file, "
            "else the configured reference directory)"
        ),
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
        "--update-docs",
        type=Path,
        metavar="DOCS_JSON",
        help="Docs site config whose navigation tab receives the reference group",
    )
    parser.add_argument("--tab", help="Navigation tab name in the docs config")
    parser.add_argument("--report-dir", type=Path, help="Override directory for reports")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Build navigation without writing output",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    paths = PathConfig(args.paths_config)
    config = load_config(args.config or paths.refnav_config)
    if args.tab:
        config["docs"]["tab"] = args.tab

    openapi_arg = args.openapi_opt or args.openapi
    openapi_path = (openapi_arg or paths.openapi_spec).resolve()
    default_out = openapi_path.parent if openapi_arg else paths.reference_dir
    out_dir = (args.out_opt or args.out or default_out).resolve()

    console.print("[bold blue]API Reference Navigation[/bold blue]")
    console.print(f"  OpenAPI: {openapi_path}")
    console.print(f"  Output:  {out_dir}")
    if args.dry_run:
        console.print("  [yellow]Mode: DRY RUN (no files will be written)[/yellow]")

    try:
        stats = generate_reference(
            openapi_path,
            out_dir,
            config,
            docs_config=args.update_docs,
            dry_run=args.dry_run,
        )
        if not args.dry_run:
            report_dir = args.report_dir or paths.ensure_report_dir_exists()
            generate_report(stats, report_dir / paths.reference_report.name)
    except (SpecLoadError, NavigationContainerError, TagValidationError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    print_summary(stats)

    if stats.intro_pages_failed > 0:
        console.print(
            f"\n[yellow]Completed with {stats.intro_pages_failed} failed introduction pages[/yellow]",
        )
        return 1

    console.print("\n[bold green]Reference navigation complete![/bold green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
