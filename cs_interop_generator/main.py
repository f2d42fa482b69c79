#!/usr/bin/env python3
"""
CLI entry point for the C# interop generator
Generates C# LibraryImport declarations, delegates, structs and enums from C headers
"""

import argparse
import logging
import sys
import os

# Add parent directory to sys.path for direct execution
if __name__ == '__main__' and __package__ is None:
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cs_interop_generator.config import ConfigurationError, parse_config_file
from cs_interop_generator.generator import CSharpInteropGenerator


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Generate C# interop declarations from C header files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --config bindings.xml --output Generated/NativeMethods.cs
  %(prog)s -C config.xml -o out.cs -I include --ignore-missing
        """
    )

    parser.add_argument(
        "-C", "--config",
        metavar="CONFIG_FILE",
        required=True,
        help="XML configuration file with headers, globals and overrides"
    )

    parser.add_argument(
        "-o", "--output",
        metavar="FILE",
        help="Output C# file (prints to stdout if not specified)"
    )

    parser.add_argument(
        "-I", "--include",
        metavar="DIRECTORY",
        action="append",
        default=[],
        help="Additional include directory (may be repeated)"
    )

    parser.add_argument(
        "--clang-path",
        metavar="PATH",
        help="Path to libclang library (if not in default location)"
    )

    parser.add_argument(
        "--ignore-missing",
        action="store_true",
        help="Continue processing even if some header files are not found (default: fail on missing files)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log progress information"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = parse_config_file(args.config)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error reading config file: {e}", file=sys.stderr)
        sys.exit(1)

    if not config.headers:
        print("Error: No headers found in config file", file=sys.stderr)
        sys.exit(1)

    config.include_dirs.extend(args.include)

    if args.clang_path:
        import clang.cindex
        clang.cindex.Config.set_library_path(args.clang_path)

    try:
        generator = CSharpInteropGenerator(config)
        result = generator.generate_from_headers(output=args.output, ignore_missing=args.ignore_missing)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except (FileNotFoundError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if result.warnings:
        print(f"Completed with {len(result.warnings)} warning(s)", file=sys.stderr)


if __name__ == "__main__":
    main()
