"""
CLI Runner - Command line interface for multinlu

Train a model from a spreadsheet, process utterances with a saved model
and export models as JSON.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..config.manager import ConfigManager, ConfigValidationError
from ..config.models import LogLevel, NluSettings
from ..core.errors import NluError
from ..core.manager import NluManager
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with train, process and export commands"""
    parser = argparse.ArgumentParser(
        prog="multinlu",
        description="Multi-locale natural language understanding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s train --excel corpus.xlsx --model model.nlp
  %(prog)s process --model model.nlp --locale en "book a flight"
  %(prog)s export --model model.nlp --minified
        """
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Settings file (TOML or JSON)"
    )
    parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        help="Override the configured logging level"
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write logs to this file"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    train = commands.add_parser("train", help="Train a model from an Excel corpus")
    train.add_argument("--excel", type=Path, required=True, help="Excel workbook with the corpus")
    train.add_argument("--model", type=Path, help="Output model file (settings default if omitted)")
    train.add_argument("--minified", action="store_true", help="Write compact JSON")

    process = commands.add_parser("process", help="Process an utterance with a saved model")
    process.add_argument("--model", type=Path, help="Model file (settings default if omitted)")
    process.add_argument("--locale", "-l", help="Locale of the utterance (guessed if omitted)")
    process.add_argument("utterance", help="Text to process")

    export = commands.add_parser("export", help="Print a saved model as JSON")
    export.add_argument("--model", type=Path, help="Model file (settings default if omitted)")
    export.add_argument("--minified", action="store_true", help="Print compact JSON")

    return parser


async def _train(manager: NluManager, args: argparse.Namespace) -> int:
    manager.load_excel(args.excel)
    await manager.train()
    path = manager.save(args.model, minified=args.minified)
    print(f"✅ Trained {len(manager.languages)} locale(s) {manager.languages}, model saved to {path}")
    return 0


async def _process(manager: NluManager, args: argparse.Namespace) -> int:
    manager.load(args.model)
    result = await manager.process(args.locale, args.utterance)
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return 0


async def _export(manager: NluManager, args: argparse.Namespace) -> int:
    manager.load(args.model)
    print(manager.export(minified=args.minified))
    return 0


COMMANDS = {
    "train": _train,
    "process": _process,
    "export": _export,
}


async def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings: NluSettings = await ConfigManager().load_config(args.config)
    except ConfigValidationError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    level = LogLevel(args.log_level) if args.log_level else settings.log_level
    setup_logging(level=level, log_file=args.log_file)

    manager = NluManager(settings)
    try:
        return await COMMANDS[args.command](manager, args)
    except (NluError, OSError) as e:
        logger.error(f"Command '{args.command}' failed: {e}")
        print(f"❌ {e}", file=sys.stderr)
        return 1


def run_cli(argv: Optional[List[str]] = None) -> int:
    """Entry point for CLI runner"""
    try:
        return asyncio.run(main(argv))
    except KeyboardInterrupt:
        print("\n👋 Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(run_cli())
