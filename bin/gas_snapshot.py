import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from gas_table import GasTable

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_PATH = ".sol_gas.log"

# (field, label) in report order
DIFF_LINES = [
    ("deployment_cost", "Deployment gas cost"),
    ("min_cost", "Minimum functions call gas cost"),
    ("avg_cost", "Average functions call gas cost"),
    ("max_cost", "Maximum functions call gas cost"),
]


class SnapshotError(ValueError):
    pass


@dataclass(frozen=True)
class Snapshot:
    deployment_cost: int = 0
    min_cost: int = 0
    avg_cost: int = 0
    # median_cost is aggregated by GasTable but not tracked here
    max_cost: int = 0

    @classmethod
    def from_gas_table(cls, gas_table: GasTable) -> "Snapshot":
        return cls(
            deployment_cost=gas_table.deployment_cost(),
            min_cost=gas_table.min_cost(),
            avg_cost=gas_table.avg_cost(),
            max_cost=gas_table.max_cost(),
        )

    @classmethod
    def from_dict(cls, data: object) -> "Snapshot":
        if not isinstance(data, dict):
            raise SnapshotError(f"expected a JSON object, got {type(data).__name__}")
        values = {}
        for f in fields(cls):
            if f.name not in data:
                raise SnapshotError(f"missing field '{f.name}'")
            value = data[f.name]
            # bool is an int subclass, reject it explicitly
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise SnapshotError(f"field '{f.name}' must be an unsigned integer, got {value!r}")
            values[f.name] = value
        return cls(**values)

    def get_diff(self, current: "Snapshot") -> str:
        """
        One line per metric that changed between this (previous) snapshot and current.
        Unchanged metrics produce nothing, so identical snapshots give an empty string.
        """
        result = ""
        for name, label in DIFF_LINES:
            previous_value = getattr(self, name)
            current_value = getattr(current, name)
            if previous_value == current_value:
                continue
            diff = previous_value - current_value
            if diff > 0:
                result += f"{label} reduced by {diff}\n"
            else:
                result += f"{label} increased by {-diff}\n"
        return result


def load(path: Path) -> Snapshot:
    """
    Load the previous snapshot; a missing file is a first run and gives all zeros.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.info(f"no snapshot at {path}, starting from zero")
        return Snapshot()
    except ValueError as exc:
        raise SnapshotError(f"{path}: invalid JSON: {exc}") from exc

    try:
        snapshot = Snapshot.from_dict(data)
    except SnapshotError as exc:
        raise SnapshotError(f"{path}: {exc}") from exc
    logger.debug(f"loaded {snapshot} from {path}")
    return snapshot


def save(snapshot: Snapshot, path: Path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(snapshot), f, indent=2)
    logger.debug(f"saved {snapshot} to {path}")
