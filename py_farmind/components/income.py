import logging

import numpy as np

from ..utility.errors import (
    DegenerateReferenceError,
    DivideByZeroError,
    InconsistentMemoryError,
)

logger = logging.getLogger(__name__)

DEFAULT_REGION = "all"


class IncomeHistory:
    """
    Bounded record of a farm's past incomes, newest first.

    Parameters
    ----------
    incomes : list
        Initial incomes with index 0 being the most recent year.
    memory : int
        Number of years retained. Must equal len(incomes).
    farm_id : str, optional
        Owner of the history (attached to raised errors).

    Notes
    -----
    The length of the history never changes: :meth:`push` prepends the new
    income and drops the oldest one.
    """

    def __init__(self, incomes, memory: int, farm_id=None):
        incomes = [float(i) for i in incomes]
        if len(incomes) != memory:
            raise InconsistentMemoryError(
                f"Income history has {len(incomes)} entries but memory is {memory}.",
                farm_id=farm_id,
            )
        self.memory = memory
        self.farm_id = farm_id
        self._incomes = incomes

    def __len__(self):
        return len(self._incomes)

    def __getitem__(self, i):
        return self._incomes[i]

    def __iter__(self):
        return iter(self._incomes)

    def push(self, income: float):
        """Append the income of the just-completed year and drop the oldest."""
        self._incomes.insert(0, float(income))
        del self._incomes[self.memory :]

    @property
    def current(self) -> float:
        return self._incomes[0]

    @property
    def reference(self) -> float:
        """Mean income of the remembered years before the most recent one."""
        return float(np.mean(self._incomes[1:]))

    def personal_change_rate(self) -> float:
        """(current - reference) / reference."""
        ref = self.reference
        if ref == 0:
            raise DegenerateReferenceError(
                "Reference income is zero; cannot compute the income change rate.",
                farm_id=self.farm_id,
            )
        return (self.current - ref) / ref

    def as_array(self) -> np.ndarray:
        return np.array(self._incomes)

    def to_list(self) -> list:
        return list(self._incomes)

    def __repr__(self):
        return f"IncomeHistory({self._incomes}, memory={self.memory})"


def _income_matrix(histories):
    lengths = {len(h) for h in histories}
    if len(lengths) > 1:
        raise InconsistentMemoryError(
            f"Income histories of the population have different lengths {sorted(lengths)}."
        )
    return np.vstack([h.as_array() for h in histories])


def initial_change_rate(histories) -> float:
    """
    Population income change rate from the initial histories.

    The mean of each farm's earlier incomes (all but the most recent) is
    averaged over farms and compared with the population mean of the most
    recent incomes.

    Parameters
    ----------
    histories : list
        IncomeHistory objects of the population.

    Returns
    -------
    float
        (current_mean - historical_mean) / historical_mean
    """
    m = _income_matrix(histories)
    historical_mean = m[:, 1:].mean(axis=1).mean()
    current_mean = m[:, 0].mean()
    if historical_mean == 0:
        raise DivideByZeroError(
            "Historical population mean income is zero; the initial trend is undefined."
        )
    return float((current_mean - historical_mean) / historical_mean)


def mean_change_rate(histories) -> float:
    """
    Mean year-over-year change rate of the population mean income.

    Parameters
    ----------
    histories : list
        IncomeHistory objects that already include the just-completed year.

    Returns
    -------
    float
        Mean over the memory window of (mean_t - mean_{t-1}) / mean_{t-1}.
    """
    m = _income_matrix(histories)
    yearly_means = m.mean(axis=0)  # newest first
    previous = yearly_means[1:]
    if np.any(previous == 0):
        raise DivideByZeroError(
            "Population mean income is zero in a remembered year; the trend is undefined."
        )
    rates = (yearly_means[:-1] - previous) / previous
    return float(rates.mean())


class PopulationIncomeTrend:
    """
    Population-wide income change rate used as the uncertainty baseline.

    Parameters
    ----------
    regions : dict, optional
        Farm id -> region key. Farms of the same region share one rate. If None,
        every farm belongs to a single region.

    Attributes
    ----------
    rates : dict
        Region key -> current change rate.
    t : int
        Number of updates performed after initialization.
    """

    def __init__(self, regions=None):
        self.regions = dict(regions) if regions else {}
        self.rates = {}
        self.t = 0

    def region_of(self, farm_id):
        return self.regions.get(farm_id, DEFAULT_REGION)

    def _group(self, histories: dict) -> dict:
        groups = {}
        for farm_id, history in histories.items():
            groups.setdefault(self.region_of(farm_id), []).append(history)
        if not groups:
            raise ValueError("Cannot compute an income trend for an empty population.")
        return groups

    def initialize(self, histories: dict) -> dict:
        """Compute the first-year rates from farm id -> IncomeHistory."""
        self.rates = {
            region: initial_change_rate(hs)
            for region, hs in self._group(histories).items()
        }
        logger.debug("Initial population income change rates: %s", self.rates)
        return self.rates

    def update(self, histories: dict) -> dict:
        """Recompute the rates after the histories received a new year."""
        self.rates = {
            region: mean_change_rate(hs) for region, hs in self._group(histories).items()
        }
        self.t += 1
        logger.debug("Population income change rates at update %d: %s", self.t, self.rates)
        return self.rates

    def rate_for(self, farm_id) -> float:
        return self.rates[self.region_of(farm_id)]
