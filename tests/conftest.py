import mesa
import pytest

from py_farmind.components.activity import ActivityCatalogue
from py_farmind.components.behavior import ConsumatAgent
from py_farmind.components.matrix import FarmProductMatrix
from py_farmind.components.person import Parameters
from py_farmind.components.social_network import SocialNetwork
from py_farmind.components.solver import Solver, SolverResult

PRODUCTS = ["wheat", "maize", "dairy", "potatoes"]


@pytest.fixture
def catalogue():
    return ActivityCatalogue([(1, "wheat"), (2, "maize"), (3, "dairy"), (4, "potatoes")])


@pytest.fixture
def pars():
    return {
        "alpha_plus": 0.88,
        "alpha_minus": 0.88,
        "lambda": 2.25,
        "phi_plus": 0.0,
        "phi_minus": 0.1,
        "a": 1.0,
        "b": 9.0,
        "k": 0.5,
        "name": "test",
    }


@pytest.fixture
def parameters(pars):
    return Parameters.from_dict(pars)


@pytest.fixture
def preferences():
    return FarmProductMatrix(
        PRODUCTS,
        {
            "f1": [1, 5, 3, 0],
            "f2": [10, 0, 0, 0],
            "f3": [0, 10, 0, 0],
        },
    )


@pytest.fixture
def experience():
    # Long experience everywhere: learning rates are ~1.
    return FarmProductMatrix(
        PRODUCTS, {"f1": [50, 50, 50, 50], "f2": [50, 50, 50, 50], "f3": [50, 50, 50, 50]}
    )


def farm_settings(incomes, activities, entrepreneurship=0.5, **kwargs):
    settings = {
        "person": {
            "age": 45,
            "education": 2,
            "memory": len(incomes),
            "entrepreneurship": entrepreneurship,
        },
        "incomes": list(incomes),
        "activities": list(activities),
    }
    settings.update(kwargs)
    return settings


@pytest.fixture
def make_farm(parameters, preferences, experience, catalogue):
    """Factory building a standalone farm agent inside a bare mesa model."""

    def _make_farm(
        farm_id="f1",
        incomes=(100, 100, 100),
        activities=("wheat",),
        weights=None,
        model=None,
        **kwargs,
    ):
        return ConsumatAgent(
            model=model if model is not None else mesa.Model(),
            farm_id=farm_id,
            settings=farm_settings(incomes, activities, **kwargs),
            parameters=parameters,
            preferences=preferences,
            experience=experience,
            network=SocialNetwork(farm_id, weights or {}),
            catalogue=catalogue,
        )

    return _make_farm


class ScriptedSolver(Solver):
    """Select the first candidate of each farm and pay a fixed income."""

    def __init__(self, incomes, drop=(), extra=None):
        self.incomes = incomes
        self.drop = set(drop)
        self.extra = extra or {}
        self.calls = []

    def solve(self, candidates, year):
        self.calls.append((year, dict(candidates)))
        results = {
            fid: SolverResult(income=self.incomes[fid], activities=names[:1])
            for fid, names in candidates.items()
            if fid not in self.drop
        }
        results.update(self.extra)
        return results


@pytest.fixture
def scripted_solver():
    return ScriptedSolver
