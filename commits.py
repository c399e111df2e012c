import logging
import os
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from io import StringIO

import pandas as pd


logger = logging.getLogger(__name__)

COLUMNS = [
    "commit",
    "author",
    "date",
    "time",
    "timezone",
    "file",
    "line",
    "depth",
    "length",
    "datetime",
]
NUMERIC_COLUMNS = ["line", "depth", "length"]
DEFAULT_TIMEZONE = "+09:00"
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class ParseError(ValueError):
    def __init__(self, message, row=None, column=None, value=None):
        self.row = row
        self.column = column
        self.value = value
        if row is not None:
            message = f"line {row}: {message}"
        super().__init__(message)


class EmptyDatasetError(ValueError):
    pass


@dataclass(frozen=True)
class LineChangeRecord:
    commit: str
    author: str
    date: pd.Timestamp
    time: str
    timezone: str
    datetime: pd.Timestamp
    file: str
    line: int
    depth: int
    length: int


@dataclass(frozen=True)
class CommitSummary:
    id: str
    url: str
    author: str
    date: pd.Timestamp
    time: str
    timezone: str
    datetime: pd.Timestamp
    hour_frac: float
    total_lines: int
    lines: tuple


@dataclass(frozen=True, eq=False)
class Dataset:
    records: tuple
    frame: pd.DataFrame

    def __len__(self):
        return len(self.records)


def load_records(path, default_timezone=DEFAULT_TIMEZONE):
    """Read a loc CSV from disk. A missing file raises FileNotFoundError."""
    if not os.path.exists(path):
        raise FileNotFoundError(path)
    with open(path, "r", encoding="utf-8") as f:
        return parse_records(f, default_timezone=default_timezone)


def parse_records(source, default_timezone=DEFAULT_TIMEZONE):
    """
    Parse loc CSV text (a string or a file object) into a Dataset.

    Every field is validated up front, so nothing downstream ever sees a
    half-parsed row: numeric columns must be decimal integers and both
    timestamps must parse, otherwise ParseError names the offending CSV line.
    """
    if isinstance(source, str):
        source = StringIO(source)
    try:
        df = pd.read_csv(source, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        raise ParseError("missing header row")
    except pd.errors.ParserError as e:
        raise ParseError(f"malformed CSV: {e}")

    missing = [c for c in COLUMNS if c not in df.columns]
    if missing:
        raise ParseError("missing columns: " + ", ".join(missing))
    df = df[COLUMNS].reset_index(drop=True).copy()

    for column in NUMERIC_COLUMNS:
        df[column] = _parse_integers(df[column], column)

    df["timezone"] = df["timezone"].str.strip()
    df.loc[df["timezone"] == "", "timezone"] = default_timezone
    df["date"] = [
        _parse_timestamp(f"{date}T00:00{tz}", i, "date", date)
        for i, (date, tz) in enumerate(zip(df["date"], df["timezone"]))
    ]
    df["datetime"] = [
        _parse_timestamp(value, i, "datetime", value)
        for i, value in enumerate(df["datetime"])
    ]

    records = tuple(
        LineChangeRecord(
            commit=row.commit,
            author=row.author,
            date=row.date,
            time=row.time,
            timezone=row.timezone,
            datetime=row.datetime,
            file=row.file,
            line=int(row.line),
            depth=int(row.depth),
            length=int(row.length),
        )
        for row in df.itertuples(index=False)
    )
    logger.debug("parsed %d line records", len(records))
    return Dataset(records=records, frame=df)


def _csv_line(index):
    # header is line 1
    return index + 2


def _parse_integers(values, column):
    text = values.str.strip()
    bad = ~text.str.fullmatch(r"[+-]?[0-9]+").astype(bool)
    if not bad.any():
        numbers = pd.Series([int(v) for v in text], index=values.index, dtype=object)
        bad = (numbers < INT64_MIN) | (numbers > INT64_MAX)
    if bad.any():
        index = bad.idxmax()
        raise ParseError(
            f"{column} is not an integer: {values[index]!r}",
            row=_csv_line(index),
            column=column,
            value=values[index],
        )
    return numbers.astype("int64")


def _parse_timestamp(text, index, column, value):
    try:
        ts = pd.Timestamp(text.strip())
    except ValueError:
        ts = pd.NaT
    if ts is pd.NaT:
        raise ParseError(
            f"{column} is not a timestamp: {value!r}",
            row=_csv_line(index),
            column=column,
            value=value,
        )
    return ts


def process_commits(records, commit_url_base=None):
    """Group line records into one CommitSummary per commit, in first-seen order."""
    records = tuple(records)
    if not records:
        return []
    keys = pd.Series([r.commit for r in records])
    commits = []
    for commit, group in keys.groupby(keys, sort=False):
        lines = tuple(records[i] for i in group.index)
        first = lines[0]
        commits.append(
            CommitSummary(
                id=commit,
                url=commit_url_base + commit if commit_url_base else None,
                author=first.author,
                date=first.date,
                time=first.time,
                timezone=first.timezone,
                datetime=first.datetime,
                hour_frac=first.datetime.hour + first.datetime.minute / 60,
                total_lines=len(lines),
                lines=lines,
            )
        )
    logger.debug("aggregated %d records into %d commits", len(records), len(commits))
    return commits


@dataclass(frozen=True)
class SummaryStats:
    total_loc: int
    total_commits: int
    files: int
    longest_file: str
    longest_file_lines: int
    max_depth: int
    longest_line: int
    average_line_length: Decimal

    def items(self):
        return [
            ("Total LOC", self.total_loc),
            ("Total commits", self.total_commits),
            ("Number of files", self.files),
            ("Longest file", self.longest_file_lines),
            ("Maximum depth", self.max_depth),
            ("Longest line", self.longest_line),
            ("Average line length", str(self.average_line_length)),
        ]

    def to_dict(self):
        return {
            "total_loc": self.total_loc,
            "total_commits": self.total_commits,
            "files": self.files,
            "longest_file": self.longest_file,
            "longest_file_lines": self.longest_file_lines,
            "max_depth": self.max_depth,
            "longest_line": self.longest_line,
            "average_line_length": float(self.average_line_length),
        }


def round_half_up(value, places=1):
    quantum = Decimal(1).scaleb(-places)
    return Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)


def summary_stats(dataset, commits):
    df = dataset.frame
    if len(df) == 0:
        raise EmptyDatasetError("no line records to summarise")
    file_lengths = df.groupby("file", sort=False).size()
    # idxmax returns the first file reaching the maximum
    longest_file = file_lengths.idxmax()
    return SummaryStats(
        total_loc=len(df),
        total_commits=len(commits),
        files=len(file_lengths),
        longest_file=longest_file,
        longest_file_lines=int(file_lengths[longest_file]),
        max_depth=int(df["depth"].max()),
        longest_line=int(df["length"].max()),
        average_line_length=round_half_up(df["length"].mean()),
    )


def file_type(path):
    name = path.rsplit("/", 1)[-1]
    if "." not in name.strip("."):
        return name
    return name.rsplit(".", 1)[-1]


def selection_stats(selected):
    """Count the selected commits and break their lines down by file type."""
    lines = [line for commit in selected for line in commit.lines]
    result = {"commits": len(selected), "lines": len(lines), "breakdown": []}
    if not lines:
        return result
    types = pd.Series([file_type(line.file) for line in lines])
    counts = types.value_counts(sort=False)
    counts = counts.sort_values(ascending=False, kind="stable")
    for name, count in counts.items():
        result["breakdown"].append(
            {
                "type": name,
                "lines": int(count),
                "percent": float(round_half_up(count / len(lines) * 100)),
            }
        )
    return result
