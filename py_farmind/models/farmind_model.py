import logging
import warnings
from copy import deepcopy

import mesa
import pandas as pd
from tqdm import tqdm

from ..components.activity import EXIT_ACTIVITY
from ..components.behavior import ConsumatAgent, Strategy
from ..components.income import PopulationIncomeTrend
from ..components.person import Parameters
from ..components.social_network import SocialNetwork
from ..config import merge_settings
from ..utility.errors import FarmindError, InconsistentMemoryError, UnknownFarmError
from ..utility.util import TimeRecorder, get_activity_names, get_agt_attr

logger = logging.getLogger(__name__)


class FarmindModel(mesa.Model):
    """
    A Mesa model coupling CONSUMAT farm agents with an external farm
    optimization solver.

    Each year every farm evaluates its satisfaction and uncertainty, picks a
    strategy, and offers a candidate activity set. The solver returns one
    realized income and a list of selected activities per farm, which are fed
    back before the population income trend is updated for the next year.

    Parameters
    ----------
    parameters : Parameters or dict
        CONSUMAT parameters shared by all farms.

        >>> pars = {
        >>>     "alpha_plus": 0.88, "alpha_minus": 0.88, "lambda": 2.25,
        >>>     "phi_plus": 0.0, "phi_minus": 0.1,
        >>>     "a": 1.0, "b": 9.0, "k": 0.5, "name": "baseline"
        >>>     }

    catalogue : ActivityCatalogue
        The master list of activities.
    farms_dict : dict
        Settings of the farms, mapped by their IDs. See ConsumatAgent.
    preferences : FarmProductMatrix
        Preference matrix of all farms.
    experience : FarmProductMatrix
        Experience matrix of all farms. It is updated in place.
    networks : dict
        Farm id -> SocialNetwork. Farms without an entry have no peers.
    solver : Solver
        The external farm-optimization solver.
    settings : dict, optional
        Model settings overwriting `py_farmind.config.default_settings`.
    init_year : int, optional
        The year before the first simulated year.
    end_year : int, optional
        The final year of the simulation. None never stops the model.
    show_step : bool, optional
        Flag to control the display of step information during simulation.
    seed : int, optional
        Seed for random number generation.
    shared_config : dict, optional
        If given, every entry overwrites the same first-level entry of all
        farm settings (e.g., a shared "decision_making" dictionary).

    Attributes
    ----------
    farms : dict
        Farm id -> ConsumatAgent.
    population_trend : PopulationIncomeTrend
        Population income change rates (uncertainty baseline).
    peer_states : dict
        Farm id -> PeerState published at the beginning of the current year.
    decisions : list
        DecisionRecord of every farm and year.
    datacollector : mesa.DataCollector
        Collects farm data after every year.
    """

    def __init__(
        self,
        parameters,
        catalogue,
        farms_dict,
        preferences,
        experience,
        networks,
        solver,
        settings=None,
        init_year=0,
        end_year=None,
        show_step=True,
        seed=None,
        shared_config=None,
    ):
        super().__init__(seed=seed)
        self.running = True
        self.time_recorder = TimeRecorder()

        if isinstance(parameters, dict):
            parameters = Parameters.from_dict(parameters)
        self.parameters = parameters
        self.catalogue = catalogue
        self.preferences = preferences
        self.experience = experience
        self.solver = solver
        self.settings = merge_settings(settings)
        self.on_error = self.settings["simulation"]["on_error"]
        if self.on_error not in ("fallback", "raise"):
            raise ValueError(f"Unknown on_error option '{self.on_error}'.")

        self.init_year = init_year
        self.start_year = init_year + 1
        self.end_year = end_year
        self.current_year = init_year
        self.t = 0
        self.show_step = show_step

        farms_dict = deepcopy(farms_dict)
        if shared_config is not None:
            for k, v in shared_config.items():
                for d in farms_dict:
                    farms_dict[d][k] = deepcopy(v)

        for label, matrix in (("preference", preferences), ("experience", experience)):
            missing = [fid for fid in farms_dict if fid not in matrix]
            if missing:
                raise UnknownFarmError(
                    f"Farms {missing} have no row in the {label} matrix.",
                    farm_id=missing[0],
                )

        farms = {}
        for farm_id, farm_dict in tqdm(
            farms_dict.items(), desc="Initialize agents", disable=not show_step
        ):
            network = networks.get(farm_id)
            if network is None:
                network = SocialNetwork(farm_id, {})
            farms[farm_id] = ConsumatAgent(
                model=self,
                farm_id=farm_id,
                settings=farm_dict,
                parameters=self.parameters,
                preferences=preferences,
                experience=experience,
                network=network,
                catalogue=catalogue,
                coordinates=farm_dict.get("coordinates"),
            )
        self.farms = farms

        memories = {farm.person.memory for farm in farms.values()}
        if len(memories) > 1:
            raise InconsistentMemoryError(
                f"Farms do not share one memory length: {sorted(memories)}."
            )
        self.memory = memories.pop() if memories else None

        self.population_trend = PopulationIncomeTrend(
            regions={fid: farm.region for fid, farm in farms.items()}
        )
        self.population_trend.initialize(self.histories)
        self.peer_states = {}
        self.decisions = []
        self.years = []

        agent_reporters = {
            "farm_id": get_agt_attr("farm_id"),
            "region": get_agt_attr("region"),
            "state": lambda a: None if a.state is None else str(a.state),
            "Sa": get_agt_attr("satisfaction"),
            "Un": get_agt_attr("uncertainty"),
            "income": get_agt_attr("history.current"),
            "learning_rate": get_agt_attr("learning_rate"),
            "age": get_agt_attr("person.age"),
            "activities": get_activity_names("current_activities"),
            "candidates": get_activity_names("candidate_activities"),
            "imitated_farm_id": get_agt_attr("imitated_farm_id"),
        }
        model_reporters = {
            s.value: (lambda m, s=s: sum(f.state == s for f in m.farms.values()))
            for s in Strategy
        }
        model_reporters["population_rate"] = lambda m: dict(m.population_trend.rates)
        self.datacollector = mesa.DataCollector(
            model_reporters=model_reporters,
            agent_reporters=agent_reporters,
        )

        msg = f"""\n
        Initial year: \t{self.init_year}
        Simulation period:\t{self.start_year} to {self.end_year}
        Number of farms:\t{len(farms)}
        Parameter set:\t{self.parameters.name}
        Initialiation duration:\t{self.time_recorder.get_elapsed_time()}
        """
        if self.show_step:
            print(msg)

    @property
    def histories(self) -> dict:
        return {fid: farm.history for fid, farm in self.farms.items()}

    def decide(self) -> dict:
        """
        Let every farm decide its candidate set for the current year.

        The peer states are published before any farm decides, so each decision
        only reads the other farms' previous-year data.

        Returns
        -------
        dict
            Farm id -> list of candidate activity names.
        """
        self.peer_states = {fid: farm.publish() for fid, farm in self.farms.items()}
        candidates = {}
        for fid, farm in self.farms.items():
            try:
                activities = farm.step()
            except FarmindError as e:
                if self.on_error == "raise":
                    raise
                warnings.warn(
                    f"{e} Farm {fid} falls back to the exit activity.",
                    RuntimeWarning,
                    stacklevel=2,
                )
                activities = farm.fall_back_to_exit()
            candidates[fid] = [act.name for act in activities]

            record = farm.record(self.current_year)
            self.decisions.append(record)
            logger.debug("%s", record)
        return candidates

    def apply_results(self, results: dict):
        """
        Feed the solver results back to the farms (matched by farm id).

        All results are validated before any farm is updated. Activity names
        that are not in the catalogue are skipped with a warning.

        Parameters
        ----------
        results : dict
            Farm id -> SolverResult.
        """
        unknown = sorted(set(results) - set(self.farms))
        if unknown:
            raise UnknownFarmError(
                f"Solver results contain farms outside the population: {unknown}.",
                farm_id=unknown[0],
            )
        missing_income = self.settings["simulation"]["missing_income"]
        updates = {}
        for fid in self.farms:
            result = results.get(fid)
            if result is None:
                warnings.warn(
                    f"Farm {fid} is missing from the solver results and exits.",
                    RuntimeWarning,
                    stacklevel=2,
                )
                updates[fid] = (missing_income, [EXIT_ACTIVITY.name])
                continue
            income = missing_income if result.income is None else result.income
            activities = [a for a in result.activities if a in self.catalogue]
            skipped = [a for a in result.activities if a not in self.catalogue]
            if skipped:
                warnings.warn(
                    f"Farm {fid}: unknown activities {skipped} in the solver results are skipped.",
                    RuntimeWarning,
                    stacklevel=2,
                )
            updates[fid] = (income, activities)

        for fid, (income, activities) in updates.items():
            self.farms[fid].update_after_round(income, activities)

    def step(self):
        """
        Advance the model by one year.

        The population income trend is updated only after all farms received
        their results, so the next year's decisions all share the same baseline.
        """
        self.current_year += 1
        self.t += 1
        logger.info("Year %s [%s]", self.current_year, self.t)

        candidates = self.decide()
        results = self.solver.solve(candidates, self.current_year)
        self.apply_results(results)
        self.population_trend.update(self.histories)

        self.years.append(self.current_year)
        self.datacollector.collect(self)
        if self.show_step:
            print(
                f"Year {self.current_year} [{self.t}]"
                + f"\t{self.time_recorder.get_elapsed_time()}\n"
            )

        if self.end_year is not None and self.current_year >= self.end_year:
            self.running = False
            if self.show_step:
                print("Done!", f"\t{self.time_recorder.get_elapsed_time()}")

    @staticmethod
    def get_dfs(model):
        """
        Extract data frames from the model.

        Parameters
        ----------
        model : FarmindModel
            The instance of the FarmindModel.

        Returns
        -------
        tuple of pd.DataFrame
            Farm data (one row per farm and year), decision records, and
            system-level data (strategy counts and population rates per year).
        """
        df_farms = model.datacollector.get_agent_vars_dataframe().reset_index()
        df_farms["year"] = df_farms["Step"] + model.init_year
        df_farms.index = df_farms["year"]

        df_decisions = pd.DataFrame([r.as_dict() for r in model.decisions])

        df_sys = model.datacollector.get_model_vars_dataframe()
        df_sys.index = pd.Index(model.years, name="year")
        return df_farms, df_decisions, df_sys
