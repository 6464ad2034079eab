#!/usr/bin/env python3
"""
Gas usage regression report for forge projects.
Runs `forge test --gas-report`, sums the gas table and prints how the totals moved since the
previous run, then stores the new totals as the next baseline.
"""
import argparse
import logging
import os
import shlex
import subprocess
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Add the bin directory to path for imports
sys.path.insert(0, os.path.dirname(__file__))

import forge_tables  # noqa: E402
import gas_snapshot  # noqa: E402
import gas_table  # noqa: E402

DEFAULT_FORGE = "forge"

logger = logging.getLogger("sol-gas")


class ForgeError(RuntimeError):
    pass


def set_verbosity(level: int) -> None:
    """
    0: WARNING (default)
    1: INFO (-v)
    2+: DEBUG (-vv)
    """
    if level == 0:
        log_level = logging.WARNING
    elif level == 1:
        log_level = logging.INFO
    else:
        log_level = logging.DEBUG
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")
    logging.getLogger().setLevel(log_level)


def forge_gas(forge: str = DEFAULT_FORGE) -> str:
    """
    Run the forge gas report and return its output.
    Any failure (launch, exit code, encoding) raises ForgeError.
    """
    command = shlex.split(forge) + ["test", "--gas-report"]
    cmd_str = " ".join(command)
    logger.info(f">>> {cmd_str}")
    try:
        result = subprocess.run(command, capture_output=True)
    except OSError as exc:
        raise ForgeError(f"could not run '{cmd_str}': {exc}") from exc

    logger.debug(f"Command returned: {result.returncode}")
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise ForgeError(f"'{cmd_str}' exited with {result.returncode}" + (f": {stderr}" if stderr else ""))

    try:
        return result.stdout.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ForgeError(f"'{cmd_str}' output is not UTF-8: {exc}") from exc


def read_report(source: str) -> str:
    # '-' is stdin, anything else a file holding a saved gas report
    if source == "-":
        return sys.stdin.read()
    try:
        return Path(source).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise gas_table.GasReportError(f"{source} is not UTF-8: {exc}") from exc


def run(report: str, snapshot_path: Path, save: bool = True, show_table: bool = False) -> str:
    """
    Diff the report against the stored snapshot, then overwrite the snapshot.
    Returns the text to print. Nothing is written unless the report and snapshot both parse.
    """
    previous = gas_snapshot.load(snapshot_path)
    table = gas_table.parse_gas_table(report)
    current = gas_snapshot.Snapshot.from_gas_table(table)
    logger.debug(f"median call gas cost {table.median_cost()} (not tracked)")

    output = previous.get_diff(current)
    if show_table:
        output += "\n" + forge_tables.render(gas_table.toNamedDataFrame(c) for c in table.contracts)

    if save:
        gas_snapshot.save(current, snapshot_path)
    return output


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compare forge gas report totals with the previous run")
    parser.add_argument(
        "--snapshot",
        help=f"Snapshot file (default: $SOL_GAS_SNAPSHOT or {gas_snapshot.DEFAULT_SNAPSHOT_PATH})",
    )
    parser.add_argument("--forge", help=f"Forge command (default: $SOL_GAS_FORGE or {DEFAULT_FORGE})")
    parser.add_argument("--input", help="Read the gas report from a file ('-' for stdin) instead of running forge")
    parser.add_argument("--no-save", action="store_true", help="Do not update the snapshot")
    parser.add_argument("--table", action="store_true", help="Also print the parsed gas tables")
    parser.add_argument("-v", action="count", default=0, help="Increase verbosity level")
    args = parser.parse_args(argv)

    set_verbosity(args.v)
    load_dotenv(Path.cwd() / ".env")

    snapshot_path = Path(args.snapshot or os.getenv("SOL_GAS_SNAPSHOT") or gas_snapshot.DEFAULT_SNAPSHOT_PATH)
    forge = args.forge or os.getenv("SOL_GAS_FORGE") or DEFAULT_FORGE

    try:
        report = read_report(args.input) if args.input else forge_gas(forge)
        output = run(report, snapshot_path, save=not args.no_save, show_table=args.table)
    except (ForgeError, gas_table.GasReportError, gas_snapshot.SnapshotError, OSError) as exc:
        logger.error(str(exc))
        return 1

    sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
