import io
import logging
from typing import Iterable

import pandas as pd
from tabulate import tabulate

logger = logging.getLogger(__name__)

# a section boundary row has exactly this many empty cells
BOUNDARY_EMPTIES = 5

Row = list[str]


def tokenize(log_data: str) -> list[Row]:
    # keep only table lines, split them into trimmed cells
    rows: list[Row] = []
    for line in log_data.splitlines():
        if "|" not in line:
            continue
        rows.append([cell.strip() for cell in line.strip("|").split("|")])
    return rows


def count_empties(row: Row) -> int:
    return sum(1 for cell in row if not cell)


def is_blank(row: Row) -> bool:
    return all(not cell for cell in row)


def split_sections(rows: list[Row]) -> list[list[Row]]:
    """
    Group the table rows into one section per contract.

    A row with exactly BOUNDARY_EMPTIES empty cells marks a section boundary. With a single
    boundary the whole table is one section. Otherwise the first section runs from the start
    of the table to the second boundary and every following section from its boundary to the
    next one (the last to the end of the table). No boundary at all gives no sections.

    Leading all-blank rows are dropped from each section, and sections left empty are skipped.
    """
    boundaries = [i for i, row in enumerate(rows) if count_empties(row) == BOUNDARY_EMPTIES]
    logger.debug(f"section boundaries at rows {boundaries}")

    if not boundaries:
        return []

    if len(boundaries) == 1:
        spans = [(0, len(rows))]
    else:
        starts = [0] + boundaries[1:]
        ends = boundaries[1:] + [len(rows)]
        spans = list(zip(starts, ends))

    sections: list[list[Row]] = []
    for start, end in spans:
        section = rows[start:end]
        while section and is_blank(section[0]):
            section = section[1:]
        if section:
            sections.append(section)
        else:
            logger.debug(f"skipping blank section at rows {start}..{end}")
    return sections


def toStr(df: pd.DataFrame) -> str:
    # how we want to show the dataframe
    return tabulate(
        df,
        headers="keys",
        showindex=False,
        tablefmt="github",
        intfmt=",",
    )


def render(named_frames: Iterable[tuple[pd.DataFrame, str]]) -> str:
    # one titled table per frame, separated by a blank line
    out = io.StringIO()
    first = True
    for df, path in named_frames:
        if first:
            first = False
        else:
            out.write("\n")

        if path:
            out.write(path + "\n")
        out.write(toStr(df) + "\n")
    return out.getvalue()
