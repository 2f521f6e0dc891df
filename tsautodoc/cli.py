"""Command line entry points: ``tsautodoc`` and ``tsautodoc-tests``."""
import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .config import DEFAULT_CONFIG_PATH, DEFAULT_LANGUAGE, load_config
from .documenter import run_documenter
from .errors import ConfigLoadFailure, MissingCredential
from .llm import required_settings
from .unit_tests import run_test_creator

logger = logging.getLogger(__name__)


def build_parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument("directory", nargs="?", help="Directory holding the .ts/.tsx sources")
    parser.add_argument(
        "language",
        nargs="?",
        default=DEFAULT_LANGUAGE,
        help="Language code of the prompt template to use (default: en)",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path of the JSON configuration (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def check_credential(model_name: str) -> None:
    """Raise MissingCredential for the first setting ``model_name`` needs that is unset."""
    for variable in required_settings(model_name):
        if not os.getenv(variable):
            raise MissingCredential(variable)


def _prepare(prog: str, description: str, argv: Optional[List[str]]):
    parser = build_parser(prog, description)
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not args.directory:
        print(f"Use: {prog} <directory> [language]")
        sys.exit(1)

    load_dotenv(dotenv_path=os.path.join(os.getcwd(), ".env"))
    try:
        config = load_config(args.config)
        check_credential(config.model.model)
    except ConfigLoadFailure as e:
        logger.error(str(e))
        sys.exit(1)
    except MissingCredential as e:
        print(
            f"The {e.variable} environment variable is not set. "
            "Please create a .env file with the following content:"
        )
        if e.variable.endswith("_API_KEY"):
            print(f"{e.variable}=your_api_key")
            print('Replace "your_api_key" with your actual API key.')
        else:
            print(f"{e.variable}=...")
        sys.exit(1)
    return args, config


def document_main(argv: Optional[List[str]] = None) -> None:
    args, config = _prepare(
        "tsautodoc", "Add generated JSDoc comments to undocumented TypeScript code", argv
    )
    try:
        summary = run_documenter(args.directory, config, args.language)
    except ConfigLoadFailure as e:
        logger.error(str(e))
        sys.exit(1)
    logger.info(
        f"Processed {summary.files} files, sent {summary.requests} requests, "
        f"wrote {summary.comments} comments"
    )


def unit_tests_main(argv: Optional[List[str]] = None) -> None:
    args, config = _prepare(
        "tsautodoc-tests", "Generate unit-test files for TypeScript class methods", argv
    )
    try:
        summary = run_test_creator(args.directory, config, args.language)
    except ConfigLoadFailure as e:
        logger.error(str(e))
        sys.exit(1)
    logger.info(
        f"Processed {summary.files} files, sent {summary.requests} requests, "
        f"created {summary.created} test files"
    )

