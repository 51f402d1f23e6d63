from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from jna_bindgen.compiler import BindingCompiler
from jna_bindgen.config import Config, Layout
from jna_bindgen.errors import ConfigError


def build_config(args: argparse.Namespace) -> Config:
    """Settings file first, then command-line overrides."""
    if args.config:
        try:
            data = json.loads(Path(args.config).read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"cannot read {args.config}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{args.config}: expected a JSON object")
        config = Config.from_dict(data)
    else:
        config = Config()

    if args.package is not None:
        config.java_jna.package = args.package
    if args.interface_name is not None:
        config.java_jna.interface_name = args.interface_name
    if args.line_length is not None:
        if args.line_length <= 0:
            raise ConfigError(f"--line-length must be positive, got {args.line_length}")
        config.line_length = args.line_length
    if args.layout is not None:
        config.function_args = Layout.from_name(args.layout)
    return config


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="jna-bindgen",
        description="Generate Java/JNA bindings from a resolved IR document",
    )
    parser.add_argument("ir", type=Path, help="Path to the IR document (.json)")
    parser.add_argument("-o", "--output", type=Path, help="Output .java file or directory")
    parser.add_argument("--config", type=Path, help="JSON settings file")
    parser.add_argument("--lib-name", help="Native library name passed to Native.load")
    parser.add_argument("--package", help="Java package of the generated file")
    parser.add_argument("--interface-name", help="Name of the generated interface")
    parser.add_argument("--line-length", type=int, help="Maximum line length before lists wrap")
    parser.add_argument(
        "--layout",
        choices=["horizontal", "vertical", "auto"],
        help="Layout of function argument lists",
    )
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.ir.exists():
        print(f"Error: {args.ir} not found", file=sys.stderr)
        return 1

    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    compiler = BindingCompiler(config)
    result = compiler.compile_file(args.ir, args.output, lib_name=args.lib_name)

    if not result.success:
        for error in result.errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    if result.output_path is not None:
        print(f"Generated: {result.output_path}")
        if args.verbose:
            print(f"\nJava code ({len(result.java_code)} bytes)")
            print(f"Placeholders: {len(result.warnings)}")
    else:
        sys.stdout.write(result.java_code)

    return 0


if __name__ == "__main__":
    sys.exit(main())
