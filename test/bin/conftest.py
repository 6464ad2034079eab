"""Pytest configuration and sample gas reports."""

import sys
import textwrap
from pathlib import Path

import pytest

BIN_DIR = Path(__file__).parent.parent.parent / "bin"

# Add the bin directory to Python path so test modules can import from it
if str(BIN_DIR) not in sys.path:
    sys.path.insert(0, str(BIN_DIR))


# forge test --gas-report output for three contracts, the last one deployment only
FORGE_REPORT = textwrap.dedent(
    """
    No files changed, compilation skipped

    Ran 2 tests for test/Counter.t.sol:CounterTest
    [PASS] testFuzz_SetNumber(uint256) (runs: 256, μ: 30454, ~: 31288)
    [PASS] test_Increment() (gas: 31303)
    Suite result: ok. 2 passed; 0 failed; 0 skipped; finished in 8.12ms (7.71ms CPU time)

    | src/Counter.sol:Counter contract |                 |       |        |       |         |
    |----------------------------------|-----------------|-------|--------|-------|---------|
    | Deployment Cost                  | Deployment Size |       |        |       |         |
    | 106715                           | 395             |       |        |       |         |
    | Function Name                    | min             | avg   | median | max   | # calls |
    | increment                        | 43404           | 43404 | 43404  | 43404 | 1       |
    | number                           | 283             | 283   | 283    | 283   | 2       |
    | setNumber                        | 2390            | 15390 | 8390   | 22290 | 3       |


    | src/Token.sol:Token contract |                 |      |        |      |         |
    |------------------------------|-----------------|------|--------|------|---------|
    | Deployment Cost              | Deployment Size |      |        |      |         |
    | 500000                       | 2500            |      |        |      |         |
    | Function Name                | min             | avg  | median | max  | # calls |
    | transfer                     | 5000            | 7000 | 6500   | 9000 | 10      |


    | src/Math.sol:Math library |                 |     |        |     |         |
    |---------------------------|-----------------|-----|--------|-----|---------|
    | Deployment Cost           | Deployment Size |     |        |     |         |
    | 1000                      | 50              |     |        |     |         |
    | Function Name             | min             | avg | median | max | # calls |


    Ran 1 test suite in 9.31ms (8.12ms CPU time): 2 tests passed, 0 failed, 0 skipped (2 total tests)
    """
)

# totals of FORGE_REPORT
FORGE_TOTALS = {
    "deployment_cost": 106715 + 500000 + 1000,
    "min_cost": 43404 + 283 + 2390 + 5000,
    "avg_cost": 43404 + 283 + 15390 + 7000,
    "median_cost": 43404 + 283 + 8390 + 6500,
    "max_cost": 43404 + 283 + 22290 + 9000,
}

# the same grammar with fully blank boundary rows around each contract
BLANK_BOUNDARY_REPORT = textwrap.dedent(
    """
    |  |  |  |  |  |
    | src/A.sol:A contract |
    |---|---|
    | Deployment Cost | Deployment Size |
    | 100 | 10 |
    | Function Name | min | avg | median | max | # calls |
    | foo | 1 | 2 | 3 | 4 | 5 |
    |  |  |  |  |  |
    | src/B.sol:B contract |
    |---|---|
    | Deployment Cost | Deployment Size |
    | 200 | 20 |
    | Function Name | min | avg | median | max | # calls |
    |  |  |  |  |  |
    """
)


@pytest.fixture
def forge_report() -> str:
    return FORGE_REPORT


@pytest.fixture
def forge_totals() -> dict:
    return dict(FORGE_TOTALS)


@pytest.fixture
def blank_boundary_report() -> str:
    return BLANK_BOUNDARY_REPORT
