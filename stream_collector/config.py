import codecs
from abc import ABC
from pathlib import Path
from typing import Any

from pydantic import field_validator, Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict

from stream_collector.components.encoding import resolve_encoding
from stream_collector.components.errors import UnsupportedEncodingError


class BaseSettingsCollector(BaseSettings, ABC):
    # Set prefix
    model_config = SettingsConfigDict(env_prefix='sc_')


class CollectorConfig(BaseSettingsCollector):
    # Encoding used to decode the byte source, None means the platform default
    encoding: str | None = None

    # Codec error handler used when decoding ("strict" makes undecodable bytes fatal)
    errors: str = "strict"

    # Worker threads are named "<prefix>-<n>"
    thread_name_prefix: str = "line-collector"

    # A daemon worker never keeps the interpreter alive on a source that never reaches EOF
    daemon: bool = True

    @field_validator("encoding", mode="after")
    @classmethod
    def check_encoding(cls, encoding: str | None) -> str | None:
        if encoding is None:
            return encoding
        try:
            return resolve_encoding(encoding)
        except UnsupportedEncodingError as e:
            raise ValueError(str(e)) from e

    @field_validator("errors", mode="after")
    @classmethod
    def check_errors(cls, errors: str) -> str:
        try:
            codecs.lookup_error(errors)
        except LookupError as e:
            raise ValueError(f"Unknown codec error handler '{errors}'") from e
        return errors


class ShellConfig(BaseSettingsCollector):
    # Seconds to wait for the command to exit before it is killed
    wait_timeout: float = 5.0

    # Exit code reported when the command cannot be run to completion
    failure_exit_code: int = 126


class RunCLIConfig(BaseSettingsCollector):
    model_config = SettingsConfigDict(env_prefix='sc_', cli_parse_args=True, cli_ignore_unknown_args=True)

    # I/O
    input_data_path: Path = Field(Path("-"),
                                  description="Input file name, '-' reads the standard input",
                                  alias=AliasChoices('i', 'input_path'))
    output_data_path: Path = Field(Path("collected_lines.json"),
                                   description="Output file name (.json, .csv, .tsv or .txt)",
                                   alias=AliasChoices('o', 'output_path'))
    encoding: str | None = Field(default=None,
                                 description="Encoding of the input, the platform default if not set",
                                 alias=AliasChoices('e', 'encoding'))
    command: str | None = Field(default=None,
                                description="Shell command to run, its output is collected instead of the input file",
                                alias=AliasChoices('c', 'command'))

    logging_config: Path | None = Field(default=None,
                                        description="Path to the logging configuration file",
                                        alias=AliasChoices('l', 'logging_config'))


# logging
DEFAULT_LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)8s] - %(name)s@%(funcName)s: %(message)s"
        }
    },
    "handlers": {
        "console": {
            "level": "DEBUG",
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stderr"
        },
        # uncomment the block below to log to a file and add 'file' in the list of handlers
        # "file": {
        #     "level": "INFO",
        #     "class": "logging.FileHandler",
        #     "formatter": "standard",
        #     "filename": "./stream_collector.log"
        # }
    },
    "loggers": {
        "": {
            "handlers": ["console"],
            "level": "INFO"
        }
    }
}
