"""CLI entry point for filesense."""

import argparse
import json
import logging
import os
import sys
from typing import Literal, NoReturn, cast

from rich.console import Console
from rich.table import Table

from filesense import __version__
from filesense.content_types import ContentTypesManager
from filesense.exceptions import FileSenseError
from filesense.magika import STDIN_PATH, Magika
from filesense.models import MagikaResult, PredictionMode
from filesense.utils.paths import expand_paths

logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
)
logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 512

# rich styles for the default output, keyed by content-type group
GROUP_STYLES = {
    "document": "bright_magenta",
    "executable": "bright_green",
    "archive": "bright_red",
    "audio": "yellow",
    "image": "yellow",
    "video": "yellow",
    "code": "bright_blue",
}
DEFAULT_STYLE = "white"


def configure_logging(verbose: bool = False, debug: bool = False) -> None:
    package_logger = logging.getLogger("filesense")
    if debug:
        package_logger.setLevel(logging.DEBUG)
    elif verbose:
        package_logger.setLevel(logging.INFO)


def format_result(
    result: MagikaResult,
    output_format: Literal["description", "mime", "label", "magic"] = "description",
    output_score: bool = False,
) -> str:
    """Format a result as a ``path: output`` line.

    Args:
        result: Identification result
        output_format: Which field of the output to show
        output_score: Append the output score as a percentage

    Returns:
        The formatted line, without colors
    """
    out = result.output
    if output_format == "mime":
        text = out.mime_type
    elif output_format == "label":
        text = out.ct_label
    elif output_format == "magic":
        text = out.magic
    else:
        text = f"{out.description} ({out.group})"
        dl = result.dl
        if dl.ct_label and dl.ct_label != out.ct_label:
            dl_score = int((dl.score or 0.0) * 100)
            text += (
                f" [Low-confidence model best-guess: {dl.description} ({dl.group}), "
                f"score={dl_score}]"
            )

    if output_score:
        text += f" {int(out.score * 100)}%"
    return f"{result.path}: {text}"


def list_output_content_types(console: Console) -> None:
    """Print the content types the tool can return."""
    ctm = ContentTypesManager.load_default()
    table = Table("#", "Content Type Label", "Description", box=None)
    for idx, ct in enumerate(ctm.get_output_content_types(), 1):
        table.add_row(str(idx), ct.name, ct.description or "")
    console.print(table)


def fail(message: str) -> NoReturn:
    logger.error(message)
    sys.exit(1)


def identify(args: argparse.Namespace) -> None:
    """Identify the files given on the command line and print the results."""
    use_colors = not args.no_colors and not args.compatibility_mode
    console = Console(no_color=not use_colors, highlight=False, emoji=False)
    configure_logging(args.verbose, args.debug)

    if args.list_output_content_types:
        if args.files:
            fail("You cannot pass any path when using the --list-output-content-types option.")
        list_output_content_types(console)
        return

    try:
        prediction_mode = PredictionMode.from_string(args.prediction_mode)
    except ValueError:
        fail(f"Invalid value for --prediction-mode: {args.prediction_mode}")

    if not args.files:
        fail("You need to pass at least one path, or - to read from stdin.")

    read_from_stdin = STDIN_PATH in args.files
    for path in args.files:
        if path != STDIN_PATH and not os.path.exists(path):
            fail(f'File or directory "{path}" does not exist.')
    if read_from_stdin:
        if len(args.files) > 1:
            fail('If you pass "-", you cannot pass anything else.')
        if args.recursive:
            fail('If you pass "-", recursive scan is not meaningful.')

    if not 0 < args.batch_size <= MAX_BATCH_SIZE:
        fail(f"Batch size needs to be greater than 0 and less or equal than {MAX_BATCH_SIZE}.")
    if args.json and args.jsonl:
        fail("You should use either --json or --jsonl, not both.")
    if sum([args.mime_type, args.label, args.compatibility_mode]) > 1:
        fail("You should use only one of --mime-type, --label, --compatibility-mode.")

    paths = list(args.files)
    if args.recursive:
        paths = expand_paths(paths, args.no_dereference)

    logger.info(f"Considering {len(paths)} files")
    logger.debug(f"Files: {','.join(paths)}")

    if args.mime_type:
        output_format = "mime"
    elif args.label:
        output_format = "label"
    elif args.compatibility_mode:
        output_format = "magic"
    else:
        output_format = "description"

    try:
        magika = Magika(
            model_dir=args.model_dir,
            prediction_mode=prediction_mode,
            no_dereference=args.no_dereference,
            verbose=args.verbose,
            debug=args.debug,
        )
    except FileSenseError as e:
        fail(f"Cannot load model: {e}")

    all_results: list[MagikaResult] = []
    with magika:
        try:
            for start in range(0, len(paths), args.batch_size):
                batch = paths[start : start + args.batch_size]
                if batch == [STDIN_PATH]:
                    results = [magika.identify_bytes(sys.stdin.buffer.read())]
                else:
                    results = magika.identify_paths(batch)

                if args.json:
                    all_results.extend(results)
                    continue
                for result in results:
                    if args.jsonl:
                        print(json.dumps(result.to_dict()))
                    else:
                        console.print(
                            format_result(result, output_format, args.output_score),
                            style=GROUP_STYLES.get(result.output.group, DEFAULT_STYLE),
                            markup=False,
                            soft_wrap=True,
                        )
        except FileSenseError as e:
            fail(f"Identification failed: {e}")

    if args.json:
        print(json.dumps([r.to_dict() for r in all_results], indent=4))


def serve(model_dir: str | None, transport: str = "stdio") -> None:
    """Start an MCP server exposing identification tools.

    Args:
        model_dir: Model directory, defaults to $FILESENSE_MODEL_DIR
        transport: Transport protocol (stdio or sse)
    """
    # Import here to avoid loading MCP unless needed
    from filesense.server import create_mcp_server

    try:
        magika = Magika(model_dir=model_dir)
    except FileSenseError as e:
        fail(f"Cannot load model: {e}")

    logger.info(f"Serving model {magika.get_model_name()} via {transport}")
    mcp = create_mcp_server(magika)
    with magika:
        mcp.run(transport=cast(Literal["stdio", "sse", "streamable-http"], transport))


def deck(model_dir: str | None, directory: str | None = None) -> None:
    """Launch the Scan Deck TUI."""
    from filesense.deck import main as deck_main

    deck_main(model_dir=model_dir, directory=directory)


def build_identify_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filesense",
        description="filesense - identify file content types with deep learning",
        epilog="Subcommands: 'filesense serve' starts an MCP server, "
        "'filesense deck' opens the Scan Deck TUI.",
    )
    parser.add_argument("files", nargs="*", help="Files or directories to scan, or - for stdin")
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help='Scan every file within directories, instead of outputting "directory"',
    )
    parser.add_argument("--json", action="store_true", help="Output in JSON format")
    parser.add_argument("--jsonl", action="store_true", help="Output in JSONL format")
    parser.add_argument(
        "-i",
        "--mime-type",
        action="store_true",
        help="Output the MIME type instead of a verbose content type description",
    )
    parser.add_argument(
        "-l",
        "--label",
        action="store_true",
        help="Output a simple label instead of a verbose content type description",
    )
    parser.add_argument(
        "-c",
        "--compatibility-mode",
        action="store_true",
        help="Output as close as possible to `file`, without colors",
    )
    parser.add_argument(
        "-s",
        "--output-score",
        action="store_true",
        help="Output the prediction score in addition to the content type",
    )
    parser.add_argument(
        "-m",
        "--prediction-mode",
        default=PredictionMode.HIGH_CONFIDENCE.value,
        help="best-guess, medium-confidence or high-confidence (default: high-confidence)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=32,
        help="How many files to process in one batch (default: 32)",
    )
    parser.add_argument(
        "--no-dereference",
        action="store_true",
        help="Do not follow symlinks",
    )
    parser.add_argument(
        "--colors",
        dest="no_colors",
        action="store_false",
        help="Enable colors (default)",
    )
    parser.add_argument(
        "--no-colors",
        dest="no_colors",
        action="store_true",
        help="Disable colors",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable more verbose output")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--list-output-content-types",
        action="store_true",
        help="Show a list of supported content types",
    )
    parser.add_argument(
        "--model-dir",
        default=None,
        help="Directory containing model.onnx (default: $FILESENSE_MODEL_DIR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__} (default model: {Magika.get_default_model_name()})",
    )
    parser.set_defaults(no_colors=False)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    argv = sys.argv[1:] if argv is None else argv

    if argv and argv[0] == "serve":
        serve_parser = argparse.ArgumentParser(
            prog="filesense serve",
            description="Start an MCP server exposing content-type identification",
        )
        serve_parser.add_argument("--model-dir", default=None, help="Directory containing model.onnx")
        serve_parser.add_argument(
            "--transport",
            choices=["stdio", "sse"],
            default="stdio",
            help="Transport protocol (default: stdio)",
        )
        args = serve_parser.parse_args(argv[1:])
        serve(args.model_dir, args.transport)
        return

    if argv and argv[0] == "deck":
        deck_parser = argparse.ArgumentParser(
            prog="filesense deck",
            description="Launch the Scan Deck TUI",
        )
        deck_parser.add_argument("directory", nargs="?", help="Directory to scan on startup")
        deck_parser.add_argument("--model-dir", default=None, help="Directory containing model.onnx")
        args = deck_parser.parse_args(argv[1:])
        deck(args.model_dir, args.directory)
        return

    identify(build_identify_parser().parse_args(argv))


if __name__ == "__main__":
    main()
