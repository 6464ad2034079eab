"""
Typed model of a `forge test --gas-report` table.

The report is tokenized and split into per-contract sections by forge_tables; each section is
then fed row by row through a ContractParser, which walks a fixed sequence of states and raises
a specific GasReportError subclass as soon as a row does not have the shape its state expects.
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

import forge_tables
import pandas as pd

logger = logging.getLogger(__name__)

DEPLOYMENT_TITLES = ["Deployment Cost", "Deployment Size"]
FUNCTION_METRICS = ["min", "avg", "median", "max", "calls"]

_UINT = re.compile(r"[0-9]+")
_RULE = re.compile(r"-+")


class State(Enum):
    EXPECT_HEADER = "ExpectHeader"
    EXPECT_SEPARATOR = "ExpectSeparator"
    EXPECT_COLUMN_TITLES = "ExpectColumnTitles"
    EXPECT_DEPLOYMENT_METRICS = "ExpectDeploymentMetrics"
    EXPECT_FUNCTION_TITLE_ROW = "ExpectFunctionTitleRow"
    CONSUME_FUNCTION_ROWS = "ConsumeFunctionRows"


class GasReportError(ValueError):
    """A gas report row is missing or does not have the expected shape."""

    def __init__(self, message: str, state: Optional[State] = None, row: Optional[list[str]] = None):
        self.state = state
        self.row = row
        if state is not None:
            message = f"{state.value}: {message}"
        if row is not None:
            message = f"{message} (row: {' | '.join(row)})"
        super().__init__(message)


class EmptyReportError(GasReportError):
    pass


class MissingRowError(GasReportError):
    pass


class HeaderRowError(GasReportError):
    pass


class SeparatorRowError(GasReportError):
    pass


class ColumnTitlesError(GasReportError):
    pass


class DeploymentMetricsError(GasReportError):
    pass


class FunctionRowError(GasReportError):
    pass


@dataclass(frozen=True)
class Function:
    name: str
    min: int
    avg: int
    median: int
    max: int
    calls: int


@dataclass
class Contract:
    file: str
    contract: str
    c_type: str
    deployment_cost: int
    deployment_size: int
    functions: list[Function] = field(default_factory=list)

    @property
    def path(self) -> str:
        return f"{self.file}:{self.contract}"


def parse_uint(cell: str) -> int:
    if not _UINT.fullmatch(cell):
        raise ValueError(f"'{cell}' is not an unsigned integer")
    return int(cell)


class ContractParser:
    """
    Consumes the rows of one section, in order:
    header, separator, deployment column titles, deployment metrics, function title row,
    then any number of function rows.
    """

    def __init__(self):
        self.state = State.EXPECT_HEADER
        self.file = ""
        self.contract = ""
        self.c_type = ""
        self.deployment_cost = 0
        self.deployment_size = 0
        self.functions: list[Function] = []
        self._handlers: dict[State, Callable[[list[str]], State]] = {
            State.EXPECT_HEADER: self._header,
            State.EXPECT_SEPARATOR: self._separator,
            State.EXPECT_COLUMN_TITLES: self._column_titles,
            State.EXPECT_DEPLOYMENT_METRICS: self._deployment_metrics,
            State.EXPECT_FUNCTION_TITLE_ROW: self._function_title_row,
            State.CONSUME_FUNCTION_ROWS: self._function_row,
        }

    def feed(self, row: list[str]) -> None:
        next_state = self._handlers[self.state](row)
        if next_state is not self.state:
            logger.debug(f"{self.state.value} -> {next_state.value}")
        self.state = next_state

    def finish(self) -> Contract:
        if self.state is not State.CONSUME_FUNCTION_ROWS:
            raise MissingRowError("section ended early", self.state)
        return Contract(
            file=self.file,
            contract=self.contract,
            c_type=self.c_type,
            deployment_cost=self.deployment_cost,
            deployment_size=self.deployment_size,
            functions=list(self.functions),
        )

    def _header(self, row: list[str]) -> State:
        # "<file>:<contract> <type>"
        cell = row[0] if row else ""
        file, colon, rest = cell.partition(":")
        contract, space, c_type = rest.partition(" ")
        if not colon or not space:
            raise HeaderRowError("expected '<file>:<contract> <type>'", State.EXPECT_HEADER, row)
        self.file, self.contract, self.c_type = file, contract, c_type
        return State.EXPECT_SEPARATOR

    def _separator(self, row: list[str]) -> State:
        if not all(_RULE.fullmatch(cell) for cell in row):
            raise SeparatorRowError("expected a row of '-' rules", State.EXPECT_SEPARATOR, row)
        return State.EXPECT_COLUMN_TITLES

    def _column_titles(self, row: list[str]) -> State:
        if row[:2] != DEPLOYMENT_TITLES:
            raise ColumnTitlesError(
                f"expected '{DEPLOYMENT_TITLES[0]} | {DEPLOYMENT_TITLES[1]}'", State.EXPECT_COLUMN_TITLES, row
            )
        return State.EXPECT_DEPLOYMENT_METRICS

    def _deployment_metrics(self, row: list[str]) -> State:
        if len(row) < 2:
            raise DeploymentMetricsError("expected deployment cost and size", State.EXPECT_DEPLOYMENT_METRICS, row)
        try:
            self.deployment_cost = parse_uint(row[0])
            self.deployment_size = parse_uint(row[1])
        except ValueError as exc:
            raise DeploymentMetricsError(str(exc), State.EXPECT_DEPLOYMENT_METRICS, row) from exc
        return State.EXPECT_FUNCTION_TITLE_ROW

    def _function_title_row(self, row: list[str]) -> State:
        # "Function Name | min | avg | median | max | # calls", not checked
        return State.CONSUME_FUNCTION_ROWS

    def _function_row(self, row: list[str]) -> State:
        if len(row) < 1 + len(FUNCTION_METRICS):
            raise FunctionRowError(
                f"expected a name and {len(FUNCTION_METRICS)} metrics", State.CONSUME_FUNCTION_ROWS, row
            )
        try:
            metrics = [parse_uint(cell) for cell in row[1 : 1 + len(FUNCTION_METRICS)]]
        except ValueError as exc:
            raise FunctionRowError(str(exc), State.CONSUME_FUNCTION_ROWS, row) from exc
        self.functions.append(Function(row[0], *metrics))
        return State.CONSUME_FUNCTION_ROWS


def parse_contract(section: list[list[str]]) -> Contract:
    parser = ContractParser()
    for row in section:
        parser.feed(row)
    return parser.finish()


@dataclass
class GasTable:
    contracts: list[Contract] = field(default_factory=list)

    def functions_frame(self) -> pd.DataFrame:
        """One row per function of every contract."""
        records = [
            (contract.path, function.name, *(getattr(function, metric) for metric in FUNCTION_METRICS))
            for contract in self.contracts
            for function in contract.functions
        ]
        df = pd.DataFrame(records, columns=["contract", "function", *FUNCTION_METRICS])
        return df.astype({metric: "int64" for metric in FUNCTION_METRICS})

    def contracts_frame(self) -> pd.DataFrame:
        records = [
            (contract.path, contract.c_type, contract.deployment_cost, contract.deployment_size)
            for contract in self.contracts
        ]
        df = pd.DataFrame(records, columns=["contract", "type", "deployment_cost", "deployment_size"])
        return df.astype({"deployment_cost": "int64", "deployment_size": "int64"})

    def _function_sum(self, metric: str) -> int:
        return int(self.functions_frame()[metric].sum())

    def deployment_cost(self) -> int:
        return int(self.contracts_frame()["deployment_cost"].sum())

    def min_cost(self) -> int:
        return self._function_sum("min")

    def avg_cost(self) -> int:
        return self._function_sum("avg")

    def median_cost(self) -> int:
        return self._function_sum("median")

    def max_cost(self) -> int:
        return self._function_sum("max")


def parse_gas_table(log_data: str) -> GasTable:
    """
    Parse the whole gas report.
    Raises EmptyReportError if the report holds no contract section.
    """
    sections = forge_tables.split_sections(forge_tables.tokenize(log_data))
    if not sections:
        raise EmptyReportError("no contract sections found in the gas report")
    contracts = [parse_contract(section) for section in sections]
    logger.info(f"parsed {len(contracts)} contracts")
    return GasTable(contracts)


def toNamedDataFrame(contract: Contract) -> tuple[pd.DataFrame, str]:
    """
    Tabulate the functions of a contract, named by its path, type and deployment metrics.
    """
    df = pd.DataFrame(
        [(f.name, *(getattr(f, metric) for metric in FUNCTION_METRICS)) for f in contract.functions],
        columns=["function", *FUNCTION_METRICS],
    )
    name = (
        f"{contract.path} {contract.c_type}"
        f" (deployment cost {contract.deployment_cost:,}, size {contract.deployment_size:,})"
    )
    return df, name
