"""
adfmark - compile markdown drafts into Atlassian Document Format for Jira and Confluence.
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from adfmark.config.manager import ConfigManager
from adfmark.logging_utils import initLogging
from adfmark.markdown import (
    STYLES,
    MarkdownParser,
    UnresolvedMentionError,
    resolve_mentions,
    split_frontmatter,
    validate_document,
)
from adfmark.utils import jsonDumps

# Configure basic logging first, stdout is reserved for documents
logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.WARNING)
logger = logging.getLogger(__name__)

STDIN_PATH = "-"


class InputError(Exception):
    """Input could not be read as UTF-8 text."""


def readBytes(path: str) -> bytes:
    """
    Read raw bytes from a file or from stdin when path is ``-``.

    Raises:
        InputError: If the file cannot be read
    """
    try:
        if path == STDIN_PATH:
            data = sys.stdin.buffer.read()
        else:
            with open(path, "rb") as f:
                data = f.read()
    except OSError as e:
        raise InputError(f"Cannot read {path}: {e.strerror or e}") from e
    return data


def readInput(path: str) -> str:
    """
    Read UTF-8 text from a file or from stdin when path is ``-``.

    Raises:
        InputError: If the file cannot be read or is not valid UTF-8
    """
    data = readBytes(path)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InputError(f"Input {path} is not valid UTF-8 text: {e}") from e


class AdfmarkCli:
    """Command orchestrator: owns the configuration and runs one subcommand."""

    def __init__(self, configPath: str = "adfmark.toml", configDirs: Optional[List[str]] = None, verbose: bool = False):
        self.configManager = ConfigManager(configPath, configDirs)
        initLogging(self.configManager.getLoggingConfig(), levelOverride="DEBUG" if verbose else None)

    def compile(self, inputPath: str, target: Optional[str] = None, pretty: Optional[bool] = None) -> int:
        compilerConfig = self.configManager.getCompilerConfig()
        target = target or compilerConfig.get("target", "jira")
        if pretty is None:
            pretty = bool(compilerConfig.get("pretty", False))

        options: Dict[str, Any] = {}
        baseUrl = self.configManager.getTargetConfig(target).get("base-url")
        if baseUrl:
            options["issue_base_url"] = baseUrl

        parser = MarkdownParser(target, options)
        document = parser.parse_to_adf(readInput(inputPath))
        logger.info(f"Compiled {inputPath} for {target}: {parser.get_stats()}")

        if pretty:
            print(jsonDumps(document, indent=2, sort_keys=False))
        else:
            print(jsonDumps(document, sort_keys=False))
        return 0

    def validate(self, inputPath: str) -> int:
        if inputPath != STDIN_PATH and not os.path.isfile(inputPath):
            result = {"valid": False, "errors": [f"File not found: {inputPath}"]}
            print(jsonDumps(result, indent=2, sort_keys=False))
            print(f"Validation failed: file not found: {inputPath}", file=sys.stderr)
            return 1

        # Undecodable input is reported as a JSON syntax error
        result = validate_document(readBytes(inputPath))
        print(jsonDumps(result.to_dict(), indent=2, sort_keys=False))

        if result.valid:
            print(f"Document is valid ({result.node_count} nodes)", file=sys.stderr)
            return 0

        print(f"Document is invalid: {len(result.errors)} error(s)", file=sys.stderr)
        for error in result.errors:
            print(f"  - {error}", file=sys.stderr)
        return 1

    def resolveMentions(self, inputPath: str, mapPath: str) -> int:
        mapping = json.loads(readInput(mapPath))
        if not isinstance(mapping, dict) or not all(isinstance(v, str) for v in mapping.values()):
            raise ValueError(f"Mention map {mapPath} must be a JSON object of email -> account id")

        try:
            resolved = resolve_mentions(readInput(inputPath), mapping)
        except UnresolvedMentionError as e:
            print(f"Unresolved mentions: {', '.join(e.emails)}", file=sys.stderr)
            return 1

        sys.stdout.write(resolved)
        if not resolved.endswith("\n"):
            sys.stdout.write("\n")
        return 0

    def frontmatter(self, inputPath: str) -> int:
        fields, _ = split_frontmatter(readInput(inputPath).replace("\r\n", "\n"))
        print(jsonDumps(fields, indent=2))
        return 0

    def run(self, args: argparse.Namespace) -> int:
        """Dispatch parsed arguments to the subcommand."""
        match args.command:
            case "compile":
                return self.compile(args.input, target=args.target, pretty=args.pretty)
            case "validate":
                return self.validate(args.input)
            case "resolve-mentions":
                return self.resolveMentions(args.input, args.map)
            case "frontmatter":
                return self.frontmatter(args.input)
            case _:
                raise ValueError(f"Unknown command: {args.command}")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="adfmark",
        description="Compile markdown drafts into Atlassian Document Format (ADF) for Jira and Confluence",
    )
    parser.add_argument(
        "-c",
        "--config",
        default="adfmark.toml",
        help="Path to configuration file (default: adfmark.toml)",
    )
    parser.add_argument(
        "--config-dir",
        action="append",
        help="Directory to search for .toml config files recursively (can be specified multiple times)",
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Pretty-print loaded configuration and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug diagnostics to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    compileParser = subparsers.add_parser("compile", help="Compile markdown to ADF JSON")
    compileParser.add_argument(
        "-t",
        "--target",
        choices=sorted(STYLES),
        default=None,
        help="Target platform (default: compiler.target from config, then jira)",
    )
    compileParser.add_argument(
        "--pretty",
        action="store_true",
        default=None,
        help="Indent the JSON output",
    )
    compileParser.add_argument("input", nargs="?", default=STDIN_PATH, help="Markdown file, '-' for stdin")

    validateParser = subparsers.add_parser("validate", help="Validate an ADF JSON document")
    validateParser.add_argument("input", help="ADF JSON file, '-' for stdin")

    mentionsParser = subparsers.add_parser("resolve-mentions", help="Replace mention placeholders with account ids")
    mentionsParser.add_argument("--map", required=True, help="JSON file mapping emails to account ids")
    mentionsParser.add_argument("input", nargs="?", default=STDIN_PATH, help="ADF JSON file, '-' for stdin")

    frontmatterParser = subparsers.add_parser("frontmatter", help="Print the frontmatter fields as JSON")
    frontmatterParser.add_argument("input", nargs="?", default=STDIN_PATH, help="Markdown file, '-' for stdin")

    args = parser.parse_args(argv)
    if not args.command and not args.print_config:
        parser.error("a command is required")
    return args


def prettyPrintConfig(configManager: ConfigManager):
    """Pretty-print the loaded configuration."""
    print(json.dumps(configManager.config, indent=2, ensure_ascii=False, sort_keys=True))


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    args = parse_arguments(argv)

    try:
        # Handle --print-config argument first
        if args.print_config:
            configManager = ConfigManager(args.config, args.config_dir)
            prettyPrintConfig(configManager)
            sys.exit(0)

        cli = AdfmarkCli(configPath=args.config, configDirs=args.config_dir, verbose=args.verbose)
        sys.exit(cli.run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except InputError as e:
        logger.error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.error(f"{args.command or 'adfmark'} failed: {e}")
        logger.exception(e)
        sys.exit(1)


if __name__ == "__main__":
    main()
