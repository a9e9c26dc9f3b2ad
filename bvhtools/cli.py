"""
Command-line interface for inspecting, validating and converting BVH files.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from bvhtools.config.settings import Settings
from bvhtools.core.conventions import Convention
from bvhtools.core.converter import convert_document
from bvhtools.core.errors import BVHError
from bvhtools.data.document import BVHDocument, BVHJoint
from bvhtools.data.exporters.bvh_exporter import BVHExporter

console = Console()

CONVENTION_CHOICES = [convention.value for convention in Convention]


def setup_logging(verbose: bool = False):
    """Configure logging for the command-line tool."""
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    logging.getLogger('bvhtools').setLevel(level)


def _load_settings(path: Optional[Path]) -> Settings:
    if path is None:
        return Settings()

    settings = Settings.from_yaml(path)
    issues = settings.validate()
    if issues:
        console.print("[yellow]Configuration warnings:[/yellow]")
        for issue in issues:
            console.print(f"  - {escape(issue)}")
    return settings


def _joint_label(joint: BVHJoint) -> str:
    channels = " ".join(kind.token for kind in joint.channel_order)
    return f"[bold]{escape(joint.name)}[/bold] ({joint.channel_count}: {channels})"


def _add_joint(tree: Tree, joint: BVHJoint):
    branch = tree.add(_joint_label(joint))
    for child in joint.children:
        _add_joint(branch, child)


def print_info(document: BVHDocument, path: Path):
    """Print the joint tree and motion summary of a document."""
    tree = Tree(_joint_label(document.root))
    for child in document.root.children:
        _add_joint(tree, child)

    console.print(f"\n[bold cyan]{escape(str(path))}[/bold cyan]")
    console.print(tree)
    console.print(f"  Joints: {len(document.joints)}")
    console.print(f"  Channels: {document.channel_count}")
    console.print(f"  Frames: {document.frame_count}")
    console.print(f"  Frame time: {document.frame_time!r} ({document.frame_rate:.2f} fps)")
    console.print(f"  Duration: {document.duration:.3f}s")


def cmd_info(args, settings: Settings) -> int:
    document = settings.parser.create_parser().parse_file(args.file)
    print_info(document, args.file)
    return 0


def cmd_validate(args, settings: Settings) -> int:
    document = settings.parser.create_parser().parse_file(args.file)
    console.print(
        f"[green]✓[/green] {escape(str(args.file))}: "
        f"{len(document.joints)} joints, {document.frame_count} frames"
    )
    return 0


def cmd_convert(args, settings: Settings) -> int:
    source = Convention(args.source)
    target = Convention(args.target)

    document = settings.parser.create_parser().parse_file(args.input)
    converted = convert_document(document, source, target)

    low_precision = args.low_precision or settings.recorder.low_precision
    text = BVHExporter(low_precision=low_precision).write_document(converted)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(text, encoding="utf-8")
    console.print(
        f"[green]✓[/green] Converted {escape(str(args.input))} "
        f"({source.value} -> {target.value}): {escape(str(args.output))}"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bvhtools",
        description="Inspect, validate and convert BVH motion files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the joint tree and motion summary
  bvhtools info walk.bvh

  # Check that a file parses
  bvhtools validate walk.bvh

  # Re-encode a Blender export in the standard Y-up convention
  bvhtools convert walk.bvh walk_yup.bvh --from blender --to standard
        """,
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Configuration file (YAML)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    info = subparsers.add_parser("info", help="Print the joint tree and motion summary")
    info.add_argument("file", type=Path, help="BVH file")
    info.set_defaults(func=cmd_info)

    validate = subparsers.add_parser("validate", help="Check that a file parses")
    validate.add_argument("file", type=Path, help="BVH file")
    validate.set_defaults(func=cmd_validate)

    convert = subparsers.add_parser("convert", help="Re-encode a file in another convention")
    convert.add_argument("input", type=Path, help="Input BVH file")
    convert.add_argument("output", type=Path, help="Output BVH file")
    convert.add_argument(
        "--from",
        dest="source",
        choices=CONVENTION_CHOICES,
        default=Convention.BLENDER.value,
        help="Convention of the input file",
    )
    convert.add_argument(
        "--to",
        dest="target",
        choices=CONVENTION_CHOICES,
        default=Convention.STANDARD.value,
        help="Convention to write",
    )
    convert.add_argument(
        "--low-precision",
        action="store_true",
        help="Write two decimals instead of six",
    )
    convert.set_defaults(func=cmd_convert)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        settings = _load_settings(args.config)
        return args.func(args, settings)
    except BVHError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1
    except OSError as e:
        console.print(f"[red]Error reading file:[/red] {escape(str(e))}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
