import logging
from dataclasses import asdict, dataclass
from enum import Enum

import mesa
import numpy as np

from ..config import merge_settings
from ..utility.errors import DegenerateReferenceError, NoViableActivityError
from .activity import EXIT_ACTIVITY
from .income import DEFAULT_REGION, IncomeHistory
from .matrix import FarmProductMatrix
from .person import Person
from .social_network import SocialNetwork

logger = logging.getLogger(__name__)


class Strategy(str, Enum):
    """CONSUMAT cognitive strategies."""

    REPETITION = "Repetition"
    IMITATION = "Imitation"
    DELIBERATION = "Deliberation"
    SOCIAL_COMPARISON = "Social comparison"

    def __str__(self):
        return self.value


def select_strategy(satisfaction, uncertainty, sa_thre, un_thre) -> Strategy:
    """
    Derive the CONSUMAT strategy from satisfaction and uncertainty.

    Parameters
    ----------
    satisfaction : float
        Satisfaction of the farm.
    uncertainty : float
        Uncertainty of the farm.
    sa_thre : float
        Satisfaction threshold. The farm is satisfied if satisfaction >= sa_thre.
    un_thre : float
        Uncertainty threshold. The farm is uncertain if uncertainty >= un_thre.

    Returns
    -------
    Strategy
    """
    satisfied = satisfaction >= sa_thre
    uncertain = uncertainty >= un_thre
    if satisfied and not uncertain:
        return Strategy.REPETITION
    if satisfied and uncertain:
        return Strategy.SOCIAL_COMPARISON
    if not satisfied and not uncertain:
        return Strategy.DELIBERATION
    return Strategy.IMITATION


def prospect_value(relative_change, alpha_plus, alpha_minus, lambda_) -> float:
    """Prospect-theory value of a relative income change."""
    if relative_change >= 0:
        return relative_change**alpha_plus
    return -lambda_ * (-relative_change) ** alpha_minus


def learning_curve(experience, a, b, k):
    """Learning rate after `experience` years, 1 / (1 + (b/a) * exp(-k * experience))."""
    return 1.0 / (1.0 + (b / a) * np.exp(-k * np.asarray(experience, dtype=float)))


@dataclass(frozen=True)
class PeerState:
    """What a farm publishes to its peers at the end of a year."""

    activities: tuple
    satisfaction: float | None = None
    preferences: tuple | None = None


@dataclass(frozen=True)
class DecisionRecord:
    """Read-only snapshot of one farm's decision in one year."""

    farm_name: str
    year: int
    parameter_set: str
    preferences: tuple
    learning_rate: float
    strategy: str
    income: float
    current_activities: tuple
    candidate_activities: tuple
    satisfaction: float
    uncertainty: float

    def as_dict(self) -> dict:
        return asdict(self)


class ConsumatAgent(mesa.Agent):
    """
    A farm agent deciding its candidate activity set with CONSUMAT.

    Parameters
    ----------
    model
        The model instance to which this agent belongs.
    farm_id : str
        Identifier of the farm.
    settings : dict
        A dictionary containing the farm's initial state and decision-making
        settings.

        - 'person': Age, education, memory and entrepreneurship of the farm head.
        - 'incomes': Income history, most recent first. Its length must equal memory.
        - 'activities': Names of the activities currently practiced.
        - 'region': Region key used for the population income trend (optional).
        - 'decision_making': Settings of the candidate selection (optional).

        >>> # A sample settings dictionary
        >>> settings = {
        >>>     "person": {
        >>>         "age": 45,
        >>>         "education": 2,
        >>>         "memory": 3,
        >>>         "entrepreneurship": 0.5
        >>>         },
        >>>     "incomes": [80, 100, 100],
        >>>     "activities": ["wheat"],
        >>>     "region": None,
        >>>     "decision_making": {
        >>>         "selection": {"method": "top_k", "k": 3}
        >>>         }
        >>>     }

    parameters : Parameters
        CONSUMAT parameters shared by all farms.
    preferences : FarmProductMatrix
        Preference scores of all farms.
    experience : FarmProductMatrix
        Years of experience of all farms. Updated in place.
    network : SocialNetwork
        The farm's social network.
    catalogue : ActivityCatalogue
        The master list of activities.
    **kwargs
        Additional keyword arguments that are set as agent attributes.

    Attributes
    ----------
    state : Strategy
        The strategy of the current year.
    satisfaction : float
        Satisfaction of the current year.
    uncertainty : float
        Uncertainty of the current year.
    current_activities : list
        Activities practiced (as returned by the solver).
    candidate_activities : list
        Activities offered to the solver this year.
    """

    def __init__(
        self,
        model,
        farm_id,
        settings: dict,
        parameters,
        preferences: FarmProductMatrix,
        experience: FarmProductMatrix,
        network: SocialNetwork,
        catalogue,
        **kwargs,
    ):
        """Initialize a farm agent in the Mesa model."""
        super().__init__(model)
        self.farm_id = farm_id

        for k, v in kwargs.items():
            setattr(self, k, v)

        self.parameters = parameters
        self.preferences = preferences
        self.experience = experience
        self.network = network
        self.catalogue = catalogue

        self.load_settings(settings)

        # Initialize CONSUMAT
        self.state = None
        self.satisfaction = None
        self.uncertainty = None
        self.personal_change_rate = None
        self.population_change_rate = None
        self.candidate_activities = None
        self.imitated_farm_id = None

    def load_settings(self, settings: dict):
        """
        Load the farm settings from a dictionary.

        Parameters
        ----------
        settings : dict
            Expected keys are 'person', 'incomes', and 'activities'. 'region'
            and 'decision_making' are optional.
        """
        self.person = Person(**settings["person"])
        self.history = IncomeHistory(
            settings["incomes"], memory=self.person.memory, farm_id=self.farm_id
        )
        activities = self.catalogue.resolve(settings["activities"])
        self.current_activities = activities if activities else [EXIT_ACTIVITY]
        self.region = settings.get("region") or DEFAULT_REGION
        self.dm_dict = merge_settings(
            {"decision_making": settings.get("decision_making", {})}
        )["decision_making"]

    def compute_satisfaction(self) -> float:
        """
        Evaluate the most recent income against the personal reference point.

        Returns
        -------
        float
            Prospect-theory value of the relative change
            (current - reference) / |reference|.
        """
        reference = self.history.reference
        if reference == 0:
            raise DegenerateReferenceError(
                "Reference income is zero; satisfaction is undefined.",
                farm_id=self.farm_id,
            )
        relative = (self.history.current - reference) / abs(reference)
        pars = self.parameters
        return prospect_value(relative, pars.alpha_plus, pars.alpha_minus, pars.lambda_)

    def compute_uncertainty(self, population_rate) -> float:
        """Absolute divergence between the farm's and the population's change rates."""
        self.personal_change_rate = self.history.personal_change_rate()
        self.population_change_rate = population_rate
        return abs(self.personal_change_rate - population_rate)

    def evaluate(self, population_rate):
        """
        Recompute satisfaction, uncertainty and the strategy of this year.

        Parameters
        ----------
        population_rate : float
            Income change rate of the farm's population (region).

        Returns
        -------
        tuple
            (satisfaction, uncertainty, strategy)
        """
        self.state = None
        self.satisfaction = None
        self.uncertainty = None
        self.candidate_activities = None
        satisfaction = self.compute_satisfaction()
        uncertainty = self.compute_uncertainty(population_rate)
        self.satisfaction = satisfaction
        self.uncertainty = uncertainty
        self.state = select_strategy(
            satisfaction, uncertainty, self.parameters.phi_plus, self.parameters.phi_minus
        )
        return satisfaction, uncertainty, self.state

    def _experience_of(self, name) -> int:
        if name not in self.experience.product_names:
            return 0
        return self.experience.get(self.farm_id, name)

    def activity_learning_rate(self, name) -> float:
        pars = self.parameters
        return float(learning_curve(self._experience_of(name), pars.a, pars.b, pars.k))

    @property
    def learning_rate(self) -> float:
        """Mean learning rate over the current (non-exit) activities."""
        names = [a.name for a in self.current_activities if a != EXIT_ACTIVITY]
        if not names:
            return 0.0
        return float(np.mean([self.activity_learning_rate(n) for n in names]))

    def score_activities(self, preference_vector) -> dict:
        """
        Score every known activity with a preference vector.

        score_j = p_j * (L_j + entrepreneurship * (1 - L_j)), where L_j is the
        learning rate of the farm for activity j. Familiar activities keep their
        full preference; unfamiliar ones are discounted unless the farm head is
        entrepreneurial.

        Returns
        -------
        dict
            Activity -> positive score. The exit activity is never scored.
        """
        ent = self.person.entrepreneurship
        scores = {}
        for name, p in zip(self.preferences.product_names, preference_vector):
            if name == EXIT_ACTIVITY.name or name not in self.catalogue:
                continue
            lr = self.activity_learning_rate(name)
            score = float(p) * (lr + ent * (1 - lr))
            if score > 0:
                scores[self.catalogue[name]] = score
        return scores

    def rank_activities(self, preference_vector) -> list:
        """Rank activities by descending score (ties by ascending activity id) and apply the selection policy."""
        scores = self.score_activities(preference_vector)
        ranked = sorted(scores, key=lambda act: (-scores[act], act.id))

        selection = self.dm_dict["selection"]
        method = selection.get("method")
        if method == "top_k":
            return ranked[: int(selection["k"])]
        if method == "score_floor":
            return [act for act in ranked if scores[act] >= selection["floor"]]
        raise ValueError(f"Unknown selection method '{method}'.")

    def blended_preferences(self, peers: dict):
        """
        Weighted average of the neighbors' published preference vectors.

        Parameters
        ----------
        peers : dict
            Farm id -> PeerState.

        Returns
        -------
        np.ndarray or None
            None if no weighted neighbor published preferences.
        """
        rows = {
            fid: peer.preferences
            for fid, peer in peers.items()
            if peer.preferences is not None
        }
        return self.network.weighted_average(rows)

    def make_dm_repetition(self, peers=None):
        return list(self.current_activities)

    def make_dm_deliberation(self, peers=None):
        return self.rank_activities(self.preferences.row(self.farm_id))

    def make_dm_imitation(self, peers):
        """
        Copy the activity set of the most influential neighbor.

        Influence is the edge weight scaled by exp(satisfaction) of the peer.
        When any neighbor has not published a satisfaction yet, the plain edge
        weight is used.
        """
        neighbors = [fid for fid in self.network.neighbors() if fid in peers]
        if not neighbors:
            self.imitated_farm_id = None
            return []
        sats = {fid: peers[fid].satisfaction for fid in neighbors}
        if any(s is None for s in sats.values()):
            scores = None
        else:
            scores = {
                fid: self.network.weight(fid) * np.exp(sats[fid]) for fid in neighbors
            }
        selected = self.network.strongest(scores=scores, candidates=neighbors)
        self.imitated_farm_id = selected
        return self.catalogue.resolve(peers[selected].activities)

    def make_dm_social_comparison(self, peers):
        """
        Keep the current activities and add the best ones under the neighbors'
        blended preferences.
        """
        blended = self.blended_preferences(peers)
        if blended is None:
            blended = self.preferences.row(self.farm_id)
        candidates = [a for a in self.current_activities if a != EXIT_ACTIVITY]
        for act in self.rank_activities(blended):
            if act not in candidates:
                candidates.append(act)
        return candidates

    def decide_activity_set(self, peers=None) -> list:
        """
        Produce the candidate activity set of this year.

        :meth:`evaluate` must have been called first.

        Parameters
        ----------
        peers : dict, optional
            Farm id -> PeerState published by the other farms in the previous
            year.

        Returns
        -------
        list
            A non-empty list of Activity objects.
        """
        if self.state is None:
            raise RuntimeError(
                f"Farm {self.farm_id} has no strategy; call evaluate() first."
            )
        peers = peers or {}
        state = self.state
        if state == Strategy.REPETITION:
            candidates = self.make_dm_repetition(peers)
        elif state == Strategy.DELIBERATION:
            candidates = self.make_dm_deliberation(peers)
        elif state == Strategy.IMITATION:
            candidates = self.make_dm_imitation(peers)
        elif state == Strategy.SOCIAL_COMPARISON:
            candidates = self.make_dm_social_comparison(peers)

        if not candidates:
            self.candidate_activities = None
            raise NoViableActivityError(
                f"Strategy '{state}' produced an empty candidate set.",
                farm_id=self.farm_id,
            )
        self.candidate_activities = candidates
        logger.debug(
            "%s [%s] candidates: %s", self.farm_id, state, [a.name for a in candidates]
        )
        return candidates

    def step(self):
        """
        Evaluate and decide for the model's current year.

        The population rate and the peer states are read from the model; both
        are fixed before any farm of the year starts deciding.
        """
        self.evaluate(self.model.population_trend.rate_for(self.farm_id))
        return self.decide_activity_set(self.model.peer_states)

    def fall_back_to_exit(self):
        """Offer only the exit activity (used when a decision failed)."""
        self.candidate_activities = [EXIT_ACTIVITY]
        return self.candidate_activities

    def update_after_round(self, income, selected_activities):
        """
        Write back the solver results of the just-completed year.

        Parameters
        ----------
        income : float
            Realized income.
        selected_activities : list
            Activity names (or Activity objects) selected by the solver. An
            empty list means the farm exits. Every name must be in the
            catalogue (KeyError otherwise, before any state changes).
        """
        activities = self.catalogue.resolve(selected_activities)
        self.history.push(income)
        self.current_activities = activities if activities else [EXIT_ACTIVITY]
        for act in self.current_activities:
            if act != EXIT_ACTIVITY and act.name in self.experience.product_names:
                self.experience.increment(self.farm_id, act.name)
        self.person.grow_older()

    def publish(self) -> PeerState:
        """Snapshot read by other farms during the next decision round."""
        return PeerState(
            activities=tuple(a.name for a in self.current_activities),
            satisfaction=self.satisfaction,
            preferences=tuple(int(v) for v in self.preferences.row(self.farm_id)),
        )

    def record(self, year) -> DecisionRecord:
        """Read-only record of this year's decision for external logging."""
        candidates = self.candidate_activities or []
        return DecisionRecord(
            farm_name=self.farm_id,
            year=year,
            parameter_set=self.parameters.name,
            preferences=tuple(int(v) for v in self.preferences.row(self.farm_id)),
            learning_rate=self.learning_rate,
            strategy=str(self.state) if self.state is not None else None,
            income=self.history.current,
            current_activities=tuple(a.name for a in self.current_activities),
            candidate_activities=tuple(a.name for a in candidates),
            satisfaction=self.satisfaction,
            uncertainty=self.uncertainty,
        )

    def get_state(self) -> dict:
        """
        Export the farm as plain data (JSON serializable).

        Returns
        -------
        dict
            Farm id, settings (person, incomes, activities, region,
            decision_making), preference and experience rows, and network weights.
        """
        return {
            "farm_id": self.farm_id,
            "settings": {
                "person": self.person.to_dict(),
                "incomes": self.history.to_list(),
                "activities": [a.name for a in self.current_activities],
                "region": self.region,
                "decision_making": self.dm_dict,
            },
            "preferences": {
                "products": list(self.preferences.product_names),
                "values": [int(v) for v in self.preferences.row(self.farm_id)],
            },
            "experience": {
                "products": list(self.experience.product_names),
                "values": [int(v) for v in self.experience.row(self.farm_id)],
            },
            "network": self.network.to_dict(),
        }

    @classmethod
    def from_state(cls, model, state: dict, parameters, catalogue, **kwargs):
        """Rebuild a farm from :meth:`get_state` output."""
        farm_id = state["farm_id"]
        preferences = FarmProductMatrix(
            state["preferences"]["products"], {farm_id: state["preferences"]["values"]}
        )
        experience = FarmProductMatrix(
            state["experience"]["products"], {farm_id: state["experience"]["values"]}
        )
        return cls(
            model=model,
            farm_id=farm_id,
            settings=state["settings"],
            parameters=parameters,
            preferences=preferences,
            experience=experience,
            network=SocialNetwork(farm_id, state["network"]),
            catalogue=catalogue,
            **kwargs,
        )
