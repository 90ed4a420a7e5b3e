import sys

import pandas as pd
import pytest

from py_farmind.components.solver import FileExchangeSolver

# Stand-in MP model: select the first allowed activity of every farm, except
# for f2, which is not reported at all.
MP_MODEL = """
import pandas as pd

df = pd.read_csv("p_allowedStratPrePost.csv")
first = df.groupby("farm", sort=False).first().reset_index()
first = first[first["farm"] != "f2"]
first.to_csv("activity_results.csv", index=False)
pd.DataFrame({"farm": first["farm"], "income": 100.0}).to_csv(
    "income_results.csv", index=False
)
"""


def test_write_strategies(tmp_path):
    solver = FileExchangeSolver(tmp_path, command=[sys.executable, "-c", "pass"])
    solver.write_strategies({"f1": ["wheat", "maize"], "f2": ["exit_activity"]})
    df = pd.read_csv(tmp_path / "p_allowedStratPrePost.csv")
    assert df.values.tolist() == [
        ["f1", "wheat"],
        ["f1", "maize"],
        ["f2", "exit_activity"],
    ]


def test_solve_round_trip(tmp_path):
    solver = FileExchangeSolver(
        tmp_path, command=[sys.executable, "-c", MP_MODEL], poll_interval=0.01
    )
    results = solver.solve(
        {"f1": ["maize", "wheat"], "f2": ["dairy"], "f3": ["wheat"]}, year=2001
    )
    assert set(results) == {"f1", "f3"}
    assert results["f1"].income == 100.0
    assert results["f1"].activities == ["maize"]


def test_stale_results_are_removed(tmp_path):
    (tmp_path / "income_results.csv").write_text("farm,income\nold,1\n")
    (tmp_path / "activity_results.csv").write_text("farm,activity\nold,wheat\n")
    solver = FileExchangeSolver(
        tmp_path,
        command=[sys.executable, "-c", "pass"],
        poll_interval=0.01,
        timeout=0.1,
    )
    with pytest.raises(TimeoutError):
        solver.solve({"f1": ["wheat"]}, year=2001)
    assert not (tmp_path / "income_results.csv").exists()
