import logging

import numpy as np

from py_farmind import (
    ActivityCatalogue,
    FarmindModel,
    FarmProductMatrix,
    SocialNetwork,
    Solver,
    SolverResult,
)

logging.basicConfig(level=logging.INFO)

# %%
# =============================================================================
# Stand-in for the farm optimization model
# =============================================================================
gross_margins = {"wheat": 400, "maize": 550, "dairy": 900, "potatoes": 700}


class MarginSolver(Solver):
    """Keep the best two candidates of each farm and pay their noisy margins."""

    def __init__(self, seed=None):
        self.rng = np.random.default_rng(seed)

    def solve(self, candidates, year):
        results = {}
        for farm_id, names in candidates.items():
            names = [n for n in names if n in gross_margins]
            selected = sorted(names, key=gross_margins.get, reverse=True)[:2]
            income = sum(gross_margins[n] for n in selected) * self.rng.normal(1, 0.15)
            results[farm_id] = SolverResult(income=income, activities=selected)
        return results


# %%
# =============================================================================
# Run simulation
# =============================================================================
catalogue = ActivityCatalogue([(1, "wheat"), (2, "maize"), (3, "dairy"), (4, "potatoes")])
products = catalogue.names
farm_ids = [f"farm{i}" for i in range(1, 7)]
rng = np.random.default_rng(3)

preferences = FarmProductMatrix(
    products, {fid: rng.integers(0, 10, len(products)) for fid in farm_ids}
)
experience = FarmProductMatrix(
    products, {fid: rng.integers(0, 15, len(products)) for fid in farm_ids}
)
networks = {
    fid: SocialNetwork(fid, {p: rng.random() for p in farm_ids if p != fid})
    for fid in farm_ids
}
farms_dict = {
    fid: {
        "person": {
            "age": int(rng.integers(30, 65)),
            "education": int(rng.integers(1, 4)),
            "memory": 3,
            "entrepreneurship": float(rng.random()),
        },
        "incomes": list(rng.normal(1000, 150, 3)),
        "activities": [products[i % len(products)]],
        "region": "north" if i < 3 else "south",
    }
    for i, fid in enumerate(farm_ids)
}

pars = {
    "alpha_plus": 0.88,
    "alpha_minus": 0.88,
    "lambda": 2.25,
    "phi_plus": 0.0,
    "phi_minus": 0.1,
    "a": 1.0,
    "b": 9.0,
    "k": 0.5,
    "name": "baseline",
}

m = FarmindModel(
    parameters=pars,
    catalogue=catalogue,
    farms_dict=farms_dict,
    preferences=preferences,
    experience=experience,
    networks=networks,
    solver=MarginSolver(seed=3),
    init_year=2020,
    end_year=2030,
    show_step=True,
    seed=3,
)
while m.running:
    m.step()

# %%
# =============================================================================
# Analyze results
# =============================================================================
df_farms, df_decisions, df_sys = FarmindModel.get_dfs(m)
print(df_sys[["Imitation", "Social comparison", "Repetition", "Deliberation"]])
print(df_decisions[["farm_name", "year", "strategy", "candidate_activities"]])
