# Load functions that directly available for user when the package is loaded.
from .components.activity import EXIT_ACTIVITY, Activity, ActivityCatalogue
from .components.behavior import ConsumatAgent, DecisionRecord, PeerState, Strategy
from .components.income import IncomeHistory, PopulationIncomeTrend
from .components.matrix import FarmProductMatrix
from .components.person import Parameters, Person
from .components.social_network import SocialNetwork
from .components.solver import FileExchangeSolver, Solver, SolverResult
from .models.farmind_model import FarmindModel
from .utility.errors import (
    DegenerateReferenceError,
    DivideByZeroError,
    FarmindError,
    InconsistentMemoryError,
    NoViableActivityError,
    UnknownFarmError,
)
from .utility.reader import load_inputs
from .utility.util import TimeRecorder
