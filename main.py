# PixelMind - generative image client
# Copyright (C) 2025 brokechubb
# 
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# 
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
# 
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

import argparse
import asyncio
import logging
import sys

from ai.clients.async_client import AsyncPixelMindClient
from ai.exceptions.pixelmind_exceptions import FormValidationError
from ai.orchestrator import GenerationOrchestrator
from config import LOG_FILE_PATH, LOG_LEVEL, LOG_TO_FILE, PIXELMIND_API_BASE_URL
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BAD_INPUT = 2


def parse_assignment(text):
    """Split NAME=VALUE from --set"""
    name, sep, value = text.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    return name.strip(), value


def build_parser():
    parser = argparse.ArgumentParser(
        prog="pixelmind",
        description="Pick a model, fill its inputs and generate an image.",
    )
    parser.add_argument("--base-url", default=PIXELMIND_API_BASE_URL,
                        help="PixelMind API base URL (default: %(default)s)")
    parser.add_argument("--list-models", action="store_true",
                        help="print the available models and exit")
    parser.add_argument("--model", help="id of the model to generate with")
    parser.add_argument("--show-schema", action="store_true",
                        help="print the selected model's input fields")
    parser.add_argument("--set", dest="assignments", action="append", default=[],
                        type=parse_assignment, metavar="NAME=VALUE",
                        help="set an input field (repeatable)")
    parser.add_argument("--download", nargs="?", const="", default=None, metavar="PATH",
                        help="save the generated image (default file name if PATH is omitted)")
    parser.add_argument("--log-level", default=LOG_LEVEL,
                        help="logging level (default: %(default)s)")
    return parser


def print_fields(fields):
    for f in fields:
        marker = "*" if f.required else " "
        bounds = ""
        if f.minimum is not None or f.maximum is not None:
            bounds = f" [{'' if f.minimum is None else f.minimum}..{'' if f.maximum is None else f.maximum}]"
        current = f" = {f.display_value}" if f.display_value else ""
        print(f" {marker} {f.name} ({f.control}){bounds}{current}")
        if f.description:
            print(f"      {f.description}")


async def run(args):
    async with AsyncPixelMindClient(base_url=args.base_url) as client:
        session = GenerationOrchestrator(client)

        models = await session.mount()
        if models is None:
            print(f"❌ {session.state.error}", file=sys.stderr)
            return EXIT_ERROR

        if args.list_models or not args.model:
            for model in models:
                print(f"{model.id}\t{model.name}")
            return EXIT_OK

        await session.select_model(args.model)
        if session.state.schema is None:
            print(f"❌ {session.state.error}", file=sys.stderr)
            return EXIT_ERROR

        for name, raw in args.assignments:
            try:
                session.set_field_input(name, raw)
            except FormValidationError as e:
                print(f"❌ {e.message}", file=sys.stderr)
                return EXIT_BAD_INPUT

        if args.show_schema:
            print_fields(session.form_fields())
            if not args.assignments:
                return EXIT_OK

        image_ref = await session.submit()
        if image_ref is None:
            print(f"❌ {session.state.error}", file=sys.stderr)
            return EXIT_ERROR
        print(image_ref)

        if args.download is not None:
            path = await session.download_result(args.download or None)
            if path is None:
                print(f"❌ {session.state.error}", file=sys.stderr)
                return EXIT_ERROR
            print(f"💾 {path}", file=sys.stderr)

        return EXIT_OK


def main(argv=None):
    """Command line entry point"""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, log_to_file=LOG_TO_FILE, log_file_path=LOG_FILE_PATH)

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("🛑 Stopped by user")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
