"""
Module providing the result classes of the collectors and of the shell helper.
"""
from pathlib import Path

import polars as pl
from pydantic import BaseModel, Field


class CollectionResult(BaseModel):
    lines: list[str] = Field(description="The decoded lines of the source, in read order and without terminators")
    encoding: str = Field(description="The canonical name of the encoding used to decode the source")
    source_name: str | None = Field(default=None, description="A human readable name of the source")

    def to_dataframe(self) -> pl.DataFrame:
        """
        Convert the lines to a polars DataFrame with a 1-based `line_number` column and a `line` column.
        """
        return pl.DataFrame(
            {"line_number": list(range(1, len(self.lines) + 1)), "line": self.lines},
            schema={"line_number": pl.Int64, "line": pl.String}
        )

    def save_as_json(self,
                     file_name: Path | str = "collected_lines.json",
                     **kwargs_model_dump_json) -> Path:
        """
        Save the result as a JSON document.
        """
        path = Path(file_name)
        path.write_text(self.model_dump_json(**kwargs_model_dump_json), encoding="utf-8")
        return path

    def save_as_csv(self, file_name: Path | str = "collected_lines.csv") -> tuple[pl.DataFrame, Path]:
        """
        Save the lines as a CSV file, or as a TSV file if the suffix of `file_name` is ".tsv".
        """
        file_name = Path(file_name)
        df = self.to_dataframe()
        df.write_csv(file_name, separator="\t" if file_name.suffix == ".tsv" else ",")
        return df, file_name

    def save_as_text(self, file_name: Path | str = "collected_lines.txt") -> Path:
        path = Path(file_name)
        path.write_text("".join(f"{line}\n" for line in self.lines), encoding="utf-8")
        return path


class CommandResult(BaseModel):
    exit_code: int = Field(description="The exit code of the command, or the failure exit code if it could not "
                                       "be run to completion")
    output: str = Field(description="The standard output lines joined with the platform line separator")
    stdout_lines: list[str] = Field(default_factory=list, description="The lines written on the standard output")
    stderr_lines: list[str] = Field(default_factory=list, description="The lines written on the standard error")

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0
