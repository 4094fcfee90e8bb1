#!/usr/bin/env python3
"""
CLI entry point for Kotlin/JNI bindings generator
Generates Rust JNI trampolines and Kotlin wrapper classes from #[java_class] impl blocks
"""

import argparse
import sys
import os
from pathlib import Path

# Add parent directory to sys.path for direct execution
if __name__ == '__main__' and __package__ is None:
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from jni_binding_generator.config import BindingConfig, parse_config_file, read_crate_name
from jni_binding_generator.errors import BindingError
from jni_binding_generator.generator import KotlinBindingsGenerator, SourceUnit, discover_sources


def collect_sources(source_dirs, source_files, excludes, skip_dirs):
    """Scan source directories and add explicitly listed files, without duplicates"""
    units = []
    seen = set()
    for src_dir in source_dirs:
        for unit in discover_sources(src_dir, excludes, skip_dirs):
            key = Path(unit.path).resolve()
            if key not in seen:
                seen.add(key)
                units.append(unit)

    for file in source_files:
        path = Path(file)
        if not path.is_file():
            raise FileNotFoundError(f"Source file not found: {file}")
        key = path.resolve()
        if key in seen:
            continue
        seen.add(key)
        src_root = next(
            (d for d in source_dirs if key.is_relative_to(Path(d).resolve())),
            path.parent,
        )
        units.append(SourceUnit.from_file(path, src_root))
    return units


def main():
    parser = argparse.ArgumentParser(
        description="Generate Kotlin bindings and JNI trampolines from #[java_class] Rust impl blocks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -g dev.gigapixel -p tokenizers -o path/to/crate
  %(prog)s -C bindings.xml -o path/to/crate --dry-run
        """
    )

    parser.add_argument(
        "-C", "--config",
        metavar="CONFIG_FILE",
        help="XML configuration file (command line options override its values)"
    )

    parser.add_argument(
        "-g", "--group",
        help="Group of the generated Kotlin project, e.g. dev.gigapixel"
    )

    parser.add_argument(
        "-p", "--package",
        help="Package of the generated Kotlin project, e.g. tokenizers"
    )

    parser.add_argument(
        "-l", "--library",
        help="Native library name (default: read from Cargo.toml in the output directory)"
    )

    parser.add_argument(
        "-s", "--src",
        action="append",
        metavar="DIRECTORY",
        help="Rust source directory to scan (repeatable; default: OUTPUT/src)"
    )

    parser.add_argument(
        "-o", "--output",
        metavar="DIRECTORY",
        default=".",
        help="Crate root the generated files are written into (default: current directory)"
    )

    parser.add_argument(
        "--platform",
        choices=["darwin", "linux", "windows"],
        help="Target platform of the native library file name (default: host platform)"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the files that would be generated without writing them"
    )

    args = parser.parse_args()

    config = BindingConfig()
    if args.config:
        try:
            config = parse_config_file(args.config)
        except (ValueError, FileNotFoundError) as e:
            print(f"Error reading config file: {e}", file=sys.stderr)
            sys.exit(1)

    # Command line options override config values
    group = args.group or config.group
    package = args.package or config.package
    platform = args.platform or config.platform
    if not group or not package:
        print("Error: group and package are required (use -g/-p or the config file)", file=sys.stderr)
        sys.exit(1)

    output = Path(args.output)
    source_dirs = args.src or config.source_dirs
    if not source_dirs and not config.source_files:
        source_dirs = [str(output / "src")]

    try:
        library = args.library or config.library or read_crate_name(output / "Cargo.toml")

        generator = KotlinBindingsGenerator(
            f"{group}.{package}",
            library,
            platform=platform,
            kotlin_source_root=config.kotlin_output,
            rust_output=config.rust_output,
        )

        sources = collect_sources(
            source_dirs, config.source_files, config.excludes,
            skip_dirs=[output / config.rust_output],
        )
        if not sources:
            print("Error: No Rust source files found", file=sys.stderr)
            sys.exit(1)

        files = generator.generate(sources, output=None if args.dry_run else str(output))
        if args.dry_run:
            for relative in files:
                print(f"Would generate: {output / relative}")
    except (BindingError, ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
