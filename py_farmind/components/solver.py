import logging
import os
import subprocess
import time
from dataclasses import dataclass, field

import pandas as pd

from ..utility.reader import read_activity_results, read_income_results

logger = logging.getLogger(__name__)


@dataclass
class SolverResult:
    """Outcome of the farm optimization for one farm and one year."""

    income: float | None
    activities: list = field(default_factory=list)


class Solver:
    """
    Interface of the external farm-optimization solver.

    The decision engine hands over every farm's candidate activity names at
    once and expects, per farm id, one realized income and the list of selected
    activities. Farms may be missing from the returned dictionary; matching is
    done by farm id, never by position.
    """

    def solve(self, candidates: dict, year: int) -> dict:
        """
        Solve the farm problems of one year.

        Parameters
        ----------
        candidates : dict
            Farm id -> ordered list of candidate activity names.
        year : int
            The simulated year.

        Returns
        -------
        dict
            Farm id -> SolverResult.
        """
        raise NotImplementedError


class FileExchangeSolver(Solver):
    """
    Run a mathematical-programming model that communicates through files.

    Each year the allowed strategies are written to `strategy_file` (one
    `farm,activity` row per candidate), previous result files are deleted, the
    `command` is executed in `workdir`, and the solver waits until both result
    files exist.

    Parameters
    ----------
    workdir : str
        Directory in which the command runs and the files live.
    command : list or str
        Command starting the solver (passed to subprocess.run).
    strategy_file : str, optional
        Name of the allowed-strategy input file.
    income_file : str, optional
        Name of the result file with `farm,income` rows.
    activity_file : str, optional
        Name of the result file with `farm,activity` rows.
    poll_interval : float, optional
        Seconds between checks for the result files.
    timeout : float, optional
        Seconds to wait for the result files before raising TimeoutError.
        None waits forever.
    """

    def __init__(
        self,
        workdir,
        command,
        strategy_file="p_allowedStratPrePost.csv",
        income_file="income_results.csv",
        activity_file="activity_results.csv",
        poll_interval=1.0,
        timeout=None,
    ):
        self.workdir = workdir
        self.command = command
        self.strategy_path = os.path.join(workdir, strategy_file)
        self.income_path = os.path.join(workdir, income_file)
        self.activity_path = os.path.join(workdir, activity_file)
        self.poll_interval = poll_interval
        self.timeout = timeout

    def write_strategies(self, candidates: dict):
        rows = [
            (farm_id, name) for farm_id, names in candidates.items() for name in names
        ]
        df = pd.DataFrame(rows, columns=["farm", "activity"])
        df.to_csv(self.strategy_path, index=False)
        return df

    def run_command(self):
        for path in (self.income_path, self.activity_path):
            if os.path.exists(path):
                os.remove(path)
        logger.info("Starting MP model: %s", self.command)
        subprocess.run(
            self.command, cwd=self.workdir, check=True, shell=isinstance(self.command, str)
        )

    def wait_for_results(self):
        start = time.monotonic()
        paths = (self.income_path, self.activity_path)
        while not all(os.path.exists(p) for p in paths):
            if self.timeout is not None and time.monotonic() - start > self.timeout:
                raise TimeoutError(
                    f"MP results were not generated within {self.timeout} seconds."
                )
            time.sleep(self.poll_interval)

    def solve(self, candidates: dict, year: int) -> dict:
        self.write_strategies(candidates)
        self.run_command()
        logger.info("Waiting for output generated by MP model (year %s)", year)
        self.wait_for_results()

        incomes = read_income_results(self.income_path)
        activities = read_activity_results(self.activity_path)
        results = {}
        for farm_id in set(incomes) | set(activities):
            results[farm_id] = SolverResult(
                income=incomes.get(farm_id), activities=activities.get(farm_id, [])
            )
        return results
