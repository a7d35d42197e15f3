"""Command line entry point for otuigen."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from .codegen import generate, generate_lua, generate_manifest
from .config import OTUIConfig, load_config
from .core.node import WidgetNode
from .core.registry import WidgetRegistry
from .core.templates import expand_templates
from .parser import DocumentParser
from .preview import PreviewRenderer
from .styles import ImageResolver, StyleLoader


logger = logging.getLogger(__name__)


def _load_registry(config: OTUIConfig) -> WidgetRegistry:
    if config.registry_path is not None:
        return WidgetRegistry.load(config.registry_path)
    return WidgetRegistry.default()


def _parse_file(path: str, config: OTUIConfig) -> tuple[DocumentParser, list, list]:
    """Parse an OTUI file, returning the parser (for its registry) and the result."""
    parser = DocumentParser(_load_registry(config))
    text = Path(path).read_text(encoding="utf-8")
    widgets, templates = parser.parse(text)
    logger.debug(f"Parsed {path}: {len(widgets)} widgets, {len(templates)} templates")
    return parser, widgets, templates


def cmd_format(args: argparse.Namespace, config: OTUIConfig) -> int:
    """Parse a file and print it regenerated."""
    _, widgets, templates = _parse_file(args.file, config)
    sys.stdout.write(generate(widgets, templates, config))
    return 0


def cmd_tree(args: argparse.Namespace, config: OTUIConfig) -> int:
    """Print the widget tree of a file."""
    _, widgets, templates = _parse_file(args.file, config)

    def show(node: WidgetNode, depth: int) -> None:
        indent = "  " * depth
        template_info = f" [template {node.template.name}]" if node.template else ""
        print(f"{indent}- {node.display_type} #{node.id} ({node.type}){template_info}")
        for child in node.children:
            show(child, depth + 1)

    for template in templates:
        print(f"template {template.name} < {template.base_type}")
        for child in template.children:
            show(child, 1)
    for root in widgets:
        show(root, 0)
    return 0


def cmd_dump(args: argparse.Namespace, config: OTUIConfig) -> int:
    """Dump the parsed document as YAML."""
    _, widgets, templates = _parse_file(args.file, config)
    if args.expand:
        widgets = expand_templates(widgets, templates)
    data = {
        "templates": [template.to_dict() for template in templates],
        "widgets": [widget.to_dict() for widget in widgets],
    }
    sys.stdout.write(yaml.safe_dump(data, sort_keys=False))
    return 0


def cmd_styles(args: argparse.Namespace, config: OTUIConfig) -> int:
    """Dump resolved styles as YAML."""
    paths = [Path(p) for p in args.paths] or config.style_paths
    styles = StyleLoader(paths).load_all()

    if args.style is None:
        data = {name: entry.to_dict() for name, entry in styles.items()}
    else:
        entry = styles.get(args.style)
        if entry is None:
            print(f"error: style '{args.style}' not found", file=sys.stderr)
            return 1
        if args.state is None:
            data = entry.to_dict()
        elif args.state in entry.resolved_states:
            data = entry.resolved_states[args.state]
        else:
            print(f"error: style '{args.style}' has no state '{args.state}'", file=sys.stderr)
            return 1

    sys.stdout.write(yaml.safe_dump(data, sort_keys=False))
    return 0


def cmd_preview(args: argparse.Namespace, config: OTUIConfig) -> int:
    """Render a preview PNG of a file."""
    parser, widgets, templates = _parse_file(args.file, config)
    widgets = expand_templates(widgets, templates)

    style_paths = [Path(p) for p in args.styles] + config.style_paths
    image_paths = [Path(p) for p in args.images] + config.image_paths
    styles = StyleLoader(style_paths).load_all() if style_paths else {}
    images = ImageResolver(image_paths) if image_paths else None

    renderer = PreviewRenderer(styles, images, config, parser.registry)
    image = renderer.render(widgets)
    image.save(args.output)
    print(f"Saved preview to {args.output} ({image.width}x{image.height})")
    return 0


def cmd_scaffold(args: argparse.Namespace, config: OTUIConfig) -> int:
    """Generate the .otui, .lua and .otmod files of a module."""
    parser, widgets, templates = _parse_file(args.file, config)
    module_name = args.module or config.module_name
    title = args.title or config.module_title

    files = {
        f"{module_name}.otui": generate(widgets, templates, config),
        f"{module_name}.lua": generate_lua(widgets, parser.registry, module_name, title),
        f"{module_name}.otmod": generate_manifest(module_name, title, author=args.author),
    }

    if args.output_dir is None:
        for filename, content in files.items():
            print(f"-- {filename}")
            sys.stdout.write(content)
            print()
        return 0

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in files.items():
        (output_dir / filename).write_text(content, encoding="utf-8")
        print(f"Wrote {output_dir / filename}")
    return 0


# Command registry - maps subcommand names to handlers
COMMANDS = {
    "format": cmd_format,
    "tree": cmd_tree,
    "dump": cmd_dump,
    "styles": cmd_styles,
    "preview": cmd_preview,
    "scaffold": cmd_scaffold,
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="otuigen",
        description="otuigen - OTUI parser, formatter and module generator",
    )
    parser.add_argument(
        "-c", "--config",
        metavar="PATH",
        help="YAML configuration file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    format_parser = subparsers.add_parser("format", help="Parse a file and print it regenerated")
    format_parser.add_argument("file", help="OTUI file")

    tree_parser = subparsers.add_parser("tree", help="Print the widget tree")
    tree_parser.add_argument("file", help="OTUI file")

    dump_parser = subparsers.add_parser("dump", help="Dump the parsed document as YAML")
    dump_parser.add_argument("file", help="OTUI file")
    dump_parser.add_argument(
        "--expand",
        action="store_true",
        help="Expand template instances before dumping",
    )

    styles_parser = subparsers.add_parser("styles", help="Dump resolved styles as YAML")
    styles_parser.add_argument("paths", nargs="*", help="Style files or directories (default: config style_paths)")
    styles_parser.add_argument("--style", metavar="NAME", help="Only dump this style")
    styles_parser.add_argument("--state", metavar="STATE", help="Dump a state overlay of --style (e.g. hover)")

    preview_parser = subparsers.add_parser("preview", help="Render a preview PNG")
    preview_parser.add_argument("file", help="OTUI file")
    preview_parser.add_argument("-o", "--output", metavar="PATH", required=True, help="Output image path")
    preview_parser.add_argument(
        "--styles",
        metavar="DIR",
        action="append",
        default=[],
        help="Style directory (repeatable)",
    )
    preview_parser.add_argument(
        "--images",
        metavar="DIR",
        action="append",
        default=[],
        help="Image directory (repeatable)",
    )

    scaffold_parser = subparsers.add_parser("scaffold", help="Generate .otui, .lua and .otmod files")
    scaffold_parser.add_argument("file", help="OTUI file")
    scaffold_parser.add_argument("--module", metavar="NAME", help="Module name (default: config module_name)")
    scaffold_parser.add_argument("--title", metavar="TITLE", help="Module title (default: config module_title)")
    scaffold_parser.add_argument("--author", metavar="NAME", help="Module author")
    scaffold_parser.add_argument("-o", "--output-dir", metavar="DIR", help="Write files here instead of printing")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the otuigen command line."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config) if args.config else OTUIConfig()
        return COMMANDS[args.command](args, config)
    except (FileNotFoundError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
