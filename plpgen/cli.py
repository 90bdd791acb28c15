# plpgen/cli.py
"""
Command line entry point.

Usage:
    plpgen generate --count 5 --first ahsan --last khan --out outputs.zip
    plpgen serve
"""
import argparse
import asyncio
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from plpgen.core.config import settings
from plpgen.core.exceptions import PlpGenError
from plpgen.generation.batch import generate_batch
from plpgen.generation.options import MAX_UNIT_COUNT, GenerationOptions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="plpgen", description="Batch-generate .plp archives from a template.")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Run one batch and write the outer zip")
    gen.add_argument("--count", type=int, default=10, help=f"Number of files (1-{MAX_UNIT_COUNT})")
    gen.add_argument("--first", default=None, help="Fixed first name (random when omitted)")
    gen.add_argument("--last", default=None, help="Fixed last name (random when omitted)")
    gen.add_argument("--text2", default=settings.generator.default_text2, help="Text for layer text2")
    gen.add_argument("--template-url", default=None, help="Override TEMPLATE_URL")
    gen.add_argument("--out", type=Path, default=Path(settings.generator.archive_name), help="Output path")

    serve = sub.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--reload", action="store_true")
    return parser


def options_from_args(args: argparse.Namespace) -> GenerationOptions:
    return GenerationOptions(
        count=args.count,
        first_mode="fixed" if args.first else "random",
        fixed_first=args.first or "",
        last_mode="fixed" if args.last else "random",
        fixed_last=args.last or "Ahmed",
        text2=args.text2,
    )


async def _print_progress(message: str) -> None:
    print(message, flush=True)


def cmd_generate(args: argparse.Namespace) -> int:
    if not 1 <= args.count <= settings.generator.max_count:
        print(f"--count must be between 1 and {settings.generator.max_count}", file=sys.stderr)
        return 2

    generator_settings = settings.generator
    if args.template_url:
        generator_settings = replace(generator_settings, template_url=args.template_url)

    try:
        data = asyncio.run(generate_batch(options_from_args(args), _print_progress, settings=generator_settings))
    except PlpGenError as e:
        print(f"❌ Error: {e.message}", file=sys.stderr)
        return 1

    args.out.write_bytes(data)
    print(f"✅ Wrote {args.out} ({len(data)} bytes)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "generate":
        return cmd_generate(args)
    if args.command == "serve":
        from plpgen.main import run
        run(reload=args.reload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
