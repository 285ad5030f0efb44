"""
This module provides the command line interface of the stream collector.
"""
import logging
import logging.config
import sys
from pathlib import Path

import orjson
from pydantic import ValidationError

from stream_collector.components.collector import LineCollector
from stream_collector.components.errors import StreamReadError, UnsupportedEncodingError
from stream_collector.components.results import CollectionResult
from stream_collector.components.shell import execute_command
from stream_collector.config import DEFAULT_LOGGING_CONFIG, RunCLIConfig, CollectorConfig

logger = logging.getLogger(__name__)

STDIN_PATH = Path("-")


def save_collection(result: CollectionResult, output_data_path: Path) -> Path:
    """
    Save `result` in the format matching the suffix of `output_data_path`.
    Raises:
        ValueError: If the suffix is not one of .json, .csv, .tsv or .txt.
    """
    if output_data_path.suffix == ".json":
        return result.save_as_json(output_data_path, indent=2)
    if output_data_path.suffix in (".csv", ".tsv"):
        _, saved_path = result.save_as_csv(output_data_path)
        return saved_path
    if output_data_path.suffix == ".txt":
        return result.save_as_text(output_data_path)
    raise ValueError(f"Unsupported output format: {output_data_path.suffix}")


def _collect_input(cli_args: RunCLIConfig) -> CollectionResult:
    if cli_args.input_data_path == STDIN_PATH:
        source, source_name = sys.stdin.buffer, "<stdin>"
    else:
        source, source_name = cli_args.input_data_path.open("rb"), str(cli_args.input_data_path)

    try:
        collector = LineCollector(source, encoding=cli_args.encoding)
    except UnsupportedEncodingError:
        source.close()
        raise

    logger.info("Collecting lines from %s", source_name)
    collector.start()
    return CollectionResult(lines=list(collector.result()), encoding=collector.encoding, source_name=source_name)


def _cli():
    """
    Function called when the program is used in CLI.
    Not meant to be used in any other way.
    """

    # Parse CLI args
    cli_args = RunCLIConfig()

    if cli_args.logging_config:
        with cli_args.logging_config.open() as f:
            json_config = orjson.loads(f.read())
            logging.config.dictConfig(json_config)
    else:
        logging.config.dictConfig(DEFAULT_LOGGING_CONFIG)
        logger.info("Default logging configuration used")

    if cli_args.command:
        if cli_args.output_data_path.suffix != ".json":
            logger.error("Command results can only be saved as .json, got %s", cli_args.output_data_path.suffix)
            sys.exit(1)
        try:
            collector_config = CollectorConfig(encoding=cli_args.encoding)
        except ValidationError as e:
            logger.error("Invalid encoding %s: %s", cli_args.encoding, e)
            sys.exit(1)
        command_result = execute_command(cli_args.command, collector_config=collector_config)
        cli_args.output_data_path.write_text(command_result.model_dump_json(indent=2), encoding="utf-8")
        logger.info("Command result saved in %s", cli_args.output_data_path)
        sys.exit(0 if command_result.succeeded else 1)

    try:
        result = _collect_input(cli_args)
    except (UnsupportedEncodingError, StreamReadError, OSError) as e:
        logger.error("Unable to collect lines from %s: %s", cli_args.input_data_path, e)
        sys.exit(1)

    try:
        saved_path = save_collection(result, cli_args.output_data_path)
    except ValueError as e:
        logger.error("%s. Please provide a .json, .csv, .tsv or .txt output", e)
        sys.exit(1)

    logger.info("%i lines saved in %s", len(result.lines), saved_path)


if __name__ == "__main__":
    _cli()
