"""
Command line entry points for the OAK toolkit.

    oak-validate <card|knowledge|trust> <file-or-url>
    oak-build <oak-dir> [output-dir]

Both tools exit 1 on usage errors. ``oak-validate`` also exits 1 when the
document is rejected or any input cannot be read; ``oak-build`` otherwise
always exits 0, reporting skipped inputs as warnings.
"""

import argparse
import json
import logging
import sys
from typing import List, NoReturn, Optional

from dotenv import load_dotenv

from oak import config, logging_config
from oak.assembler import build_site
from oak.document_utils import load_document
from oak.errors import OakError
from oak.schema_loader import DOCUMENT_TYPES, get_registry

logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _add_log_level(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=sorted(config.VALID_LOG_LEVELS),
        help="Logging level (default: OAK_LOG_LEVEL or INFO)",
    )


def _configure(args: argparse.Namespace):
    load_dotenv(override=False)  # Don't override existing env vars
    if args.log_level:
        config.set_log_level(args.log_level)
    logging_config.setup_logging(config.get_log_level())


def build_validate_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="oak-validate",
        description="Validate an OAK JSON document against the protocol schemas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s card oak/card.json
  %(prog)s knowledge oak/knowledge/2026-02-02/my-finding.json
  %(prog)s trust oak/trust/agent-x/a2a.json
  %(prog)s card https://agent.example.com/oak/card
        """,
    )
    parser.add_argument("type", choices=DOCUMENT_TYPES, help="Document type")
    parser.add_argument("file", help="Path or http(s) URL of the JSON document")
    parser.add_argument(
        "--schema-dir",
        help="Directory containing the schema files (default: OAK_SCHEMA_DIR or the bundled schemas)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON instead of text",
    )
    _add_log_level(parser)
    return parser


def validate_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for ``oak-validate``."""
    args = build_validate_parser().parse_args(argv)
    _configure(args)
    if args.schema_dir:
        config.set_schema_dir(args.schema_dir)

    try:
        get_registry().get(args.type)
        data = load_document(args.file)
    except OakError as e:
        print(str(e), file=sys.stderr)
        return 1

    violations = get_registry().validate(args.type, data)
    logger.debug(f"{args.file}: {len(violations)} violation(s) against the {args.type} schema")

    if args.json:
        print(
            json.dumps(
                {
                    "file": args.file,
                    "type": args.type,
                    "valid": not violations,
                    "violations": [v.to_dict() for v in violations],
                },
                indent=2,
                ensure_ascii=False,
            )
        )
    elif not violations:
        print(f"✅ {args.file} is valid ({args.type})")
    else:
        print(f"❌ {args.file} has {len(violations)} validation error(s):")
        for violation in violations:
            print(f"   {violation}")

    return 0 if not violations else 1


def build_build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="oak-build",
        description="Generate servable OAK endpoints from a local OAK workspace",
    )
    parser.add_argument("oak_dir", metavar="oak-dir", help="Workspace with card.json, knowledge/ and trust/")
    parser.add_argument(
        "output_dir",
        metavar="output-dir",
        nargs="?",
        help="Output directory (default: <oak-dir>/site)",
    )
    _add_log_level(parser)
    return parser


def build_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for ``oak-build``."""
    args = build_build_parser().parse_args(argv)
    _configure(args)

    output_dir = args.output_dir or config.get_default_output_dir(args.oak_dir)
    print(f"Building OAK site: {args.oak_dir} → {output_dir}")

    result = build_site(args.oak_dir, output_dir, echo=print)

    if result.skipped:
        print(f"⚠️  Skipped {len(result.skipped)} file(s):")
        for skipped in result.skipped:
            print(f"   {skipped.path}: {skipped.reason}")
    print(f"\n🌳 OAK site built at: {result.output_dir}")
    print("   Serve with any static file server or deploy to GitHub Pages.")
    return 0

