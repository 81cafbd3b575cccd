#!/usr/bin/env python3
"""
PlantUML Rendering Tool for Markdown Documents

Renders the ```plantuml blocks of a markdown file into image files and writes
a rewritten markdown file that references them, or bundles everything into a
ZIP archive. Standalone PlantUML sources (.puml) are rendered directly.
"""

import argparse
import logging
import sys
from pathlib import Path

from .core.archive import archive_file_name
from .core.errors import GatewayError
from .core.processor import diagram_file_name
from .core.renderer import parse_format
from .library import PlantUMLLibrary, read_text_file
from .utils.config import Config

PLANTUML_SOURCE_SUFFIXES = ('.puml', '.plantuml', '.pu')


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Render PlantUML blocks in markdown documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  plantuml-gateway notes.md ./out/
  plantuml-gateway --input notes.md --output ./out/ --format png --zip
  plantuml-gateway sequence.puml ./out/ --format pdf
        """
    )

    parser.add_argument(
        'input_file',
        nargs='?',
        help='Input markdown or PlantUML file path'
    )

    parser.add_argument(
        'output_dir',
        nargs='?',
        help='Output directory path'
    )

    parser.add_argument(
        '--input', '-i',
        dest='input_file_flag',
        help='Input file path (alternative to positional argument)'
    )

    parser.add_argument(
        '--output', '-o',
        dest='output_dir_flag',
        help='Output directory path (alternative to positional argument)'
    )

    parser.add_argument(
        '--format', '-f',
        default=None,
        help='Output format: png, svg, pdf or eps (default: DEFAULT_FORMAT or svg)'
    )

    parser.add_argument(
        '--zip',
        action='store_true',
        help='Write a single ZIP archive instead of loose files'
    )

    parser.add_argument(
        '--include-source',
        action='store_true',
        help='Include the original markdown in the ZIP archive'
    )

    parser.add_argument(
        '--no-validate',
        action='store_true',
        help='Skip the PlantUML directive and tag checks'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    return parser.parse_args(argv)


def validate_arguments(args: argparse.Namespace) -> tuple[Path, Path]:
    """Validate and normalize arguments."""
    input_file = args.input_file or args.input_file_flag
    if not input_file:
        print("Error: Input file is required", file=sys.stderr)
        sys.exit(1)

    input_path = Path(input_file)
    if not input_path.is_file():
        print(f"Error: Input file does not exist: {input_path}", file=sys.stderr)
        sys.exit(1)

    output_dir = args.output_dir or args.output_dir_flag
    if not output_dir:
        print("Error: Output directory is required", file=sys.stderr)
        sys.exit(1)

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    return input_path, output_path


def build_config(args: argparse.Namespace) -> Config:
    overrides = {}
    if args.include_source:
        overrides['include_source_in_zip'] = True
    if args.no_validate:
        overrides['validate_code'] = False
    return Config(**overrides)


def render_source_file(library: PlantUMLLibrary, input_path: Path, output_path: Path, fmt, verbose: bool) -> Path:
    """Render a standalone PlantUML file to ``diagram_1.<ext>``."""
    output_format = parse_format(fmt if fmt is not None else library.config.DEFAULT_FORMAT)
    source = read_text_file(input_path)
    data = library.generate_diagram(source, output_format)

    output_file = output_path / diagram_file_name(1, output_format)
    output_file.write_bytes(data)
    if verbose:
        print(f"Saved: {output_file.name} ({len(data)} bytes)")
    return output_file


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)
    input_path, output_path = validate_arguments(args)
    config = build_config(args)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
        print(f"Input file: {input_path}")
        print(f"Output directory: {output_path}")
        print(f"Configuration: {config.to_dict()}")

    library = PlantUMLLibrary(config=config)

    try:
        if input_path.suffix.lower() in PLANTUML_SOURCE_SUFFIXES:
            render_source_file(library, input_path, output_path, args.format, args.verbose)
            print("Diagram rendered")
            return 0

        summary = library.process_markdown_file(
            input_path, output_path, fmt=args.format, as_archive=args.zip
        )
        result = summary["result"]

        if args.verbose:
            print("Processing summary:")
            print(f"  - PlantUML blocks: {result.total_blocks}")
            print(f"  - Diagrams rendered: {len(result.diagrams)}")
            for failure in result.failures:
                print(f"  - Block #{failure.sequence} failed: {failure.reason}")
            for path in summary["files"]:
                print(f"    Saved: {path.name}")

        if args.zip:
            print(f"Archive written: {output_path / archive_file_name(input_path.name)}")
        else:
            print(f"Rendered {len(result.diagrams)} of {result.total_blocks} PlantUML blocks")
        return 0

    except GatewayError as e:
        print(f"Error during processing: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error during processing: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    sys.exit(main())
