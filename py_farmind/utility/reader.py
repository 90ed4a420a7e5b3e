"""
Read the CSV input tables of a FARMIND data folder with pandas.

Expected files in a data folder:

- activities.csv: `id,name` rows forming the master list of activities.
- parameters.csv: one parameter set per row, columns `index, alpha_plus,
  alpha_minus, lambda, phi_plus, phi_minus, a, b, k, name`.
- products_preference.csv and farming_years.csv: farm x activity matrices, the
  first column holds the farm name.
- social_networks.csv: square matrix of edge weights, the first column holds
  the root farm name.
- farm_data.csv: one farm per row (see :func:`read_farms`).
- regions.csv (optional): `farm,region` rows.
"""
import datetime
import os

import pandas as pd

from ..components.activity import ActivityCatalogue
from ..components.matrix import FarmProductMatrix
from ..components.person import Parameters
from ..components.social_network import SocialNetwork

# Column positions in farm_data.csv
NAME = 0
COORDINATE1 = 1
COORDINATE2 = 2
BIRTH_YEAR = 3
EDUCATION = 4
MEMORY = 5
ENTREPRENEURSHIP = 6
START_ACTION_INDEX = 7
INCOME_INDEX = 10


def read_activities(path) -> ActivityCatalogue:
    df = pd.read_csv(path, skipinitialspace=True)
    return ActivityCatalogue(
        [(int(row.iloc[0]), str(row.iloc[1]).strip()) for _, row in df.iterrows()]
    )


def read_parameters(path, parameter_set=1) -> Parameters:
    """
    Read one parameter set.

    Parameters
    ----------
    path : str
        Path of parameters.csv.
    parameter_set : int, optional
        1-based row of the parameter set to use, by default 1.
    """
    df = pd.read_csv(path, skipinitialspace=True)
    if not 1 <= parameter_set <= len(df):
        raise ValueError(
            f"Parameter set {parameter_set} is not in {path} ({len(df)} sets)."
        )
    row = df.iloc[parameter_set - 1]
    keys = ["alpha_plus", "alpha_minus", "lambda", "phi_plus", "phi_minus", "a", "b", "k"]
    pars = {k: float(row.iloc[i + 1]) for i, k in enumerate(keys)}
    pars["name"] = str(row.iloc[9]).strip()
    return Parameters.from_dict(pars)


def read_product_matrix(path) -> FarmProductMatrix:
    df = pd.read_csv(path, index_col=0, skipinitialspace=True)
    df.index = df.index.astype(str).str.strip()
    df.columns = df.columns.astype(str).str.strip()
    return FarmProductMatrix.from_frame(df.fillna(0).astype(int))


def read_social_networks(path) -> dict:
    df = pd.read_csv(path, index_col=0, skipinitialspace=True)
    df.index = df.index.astype(str).str.strip()
    df.columns = df.columns.astype(str).str.strip()
    return SocialNetwork.from_frame(df.fillna(0.0).astype(float))


def read_farms(path, catalogue: ActivityCatalogue, current_year=None) -> dict:
    """
    Read farm_data.csv into farm settings dictionaries.

    Columns are positional: name, two coordinates, birth year of the farm
    head, education, memory, entrepreneurship, three activity slots, and then
    `memory` incomes (most recent first). Activity slots holding names that
    are not in the catalogue are skipped.

    Parameters
    ----------
    path : str
        Path of farm_data.csv.
    catalogue : ActivityCatalogue
        The master list of activities.
    current_year : int, optional
        Year used to convert the birth year into an age. Default is today's year.

    Returns
    -------
    dict
        Farm id -> settings dictionary accepted by ConsumatAgent.
    """
    if current_year is None:
        current_year = datetime.date.today().year
    df = pd.read_csv(path, header=None, skiprows=1, dtype=str, skipinitialspace=True)

    farms_dict = {}
    for _, row in df.iterrows():
        values = [v.strip() if isinstance(v, str) else v for v in row.tolist()]
        name = values[NAME]
        memory = int(values[MEMORY])
        activities = [
            v
            for v in values[START_ACTION_INDEX:INCOME_INDEX]
            if isinstance(v, str) and v in catalogue
        ]
        incomes = [float(v) for v in values[INCOME_INDEX : INCOME_INDEX + memory]]
        farms_dict[name] = {
            "person": {
                "age": current_year - int(values[BIRTH_YEAR]),
                "education": int(values[EDUCATION]),
                "memory": memory,
                "entrepreneurship": float(values[ENTREPRENEURSHIP]),
            },
            "incomes": incomes,
            "activities": activities,
            "coordinates": (float(values[COORDINATE1]), float(values[COORDINATE2])),
        }
    return farms_dict


def read_regions(path) -> dict:
    df = pd.read_csv(path, dtype=str, skipinitialspace=True)
    return {str(r.iloc[0]).strip(): str(r.iloc[1]).strip() for _, r in df.iterrows()}


def read_income_results(path) -> dict:
    """Read `farm,income` rows produced by the solver."""
    df = pd.read_csv(path, skipinitialspace=True)
    return {str(r.iloc[0]).strip(): float(r.iloc[1]) for _, r in df.iterrows()}


def read_activity_results(path) -> dict:
    """Read `farm,activity` rows (several per farm) produced by the solver."""
    df = pd.read_csv(path, dtype=str, skipinitialspace=True)
    activities = {}
    for _, r in df.iterrows():
        activities.setdefault(str(r.iloc[0]).strip(), []).append(str(r.iloc[1]).strip())
    return activities


def load_inputs(data_dir, parameter_set=1, current_year=None) -> dict:
    """
    Load every input table of a data folder.

    Returns
    -------
    dict
        Keyword arguments for FarmindModel: 'parameters', 'catalogue',
        'farms_dict', 'preferences', 'experience', and 'networks'.
    """
    catalogue = read_activities(os.path.join(data_dir, "activities.csv"))
    farms_dict = read_farms(
        os.path.join(data_dir, "farm_data.csv"), catalogue, current_year=current_year
    )
    regions_path = os.path.join(data_dir, "regions.csv")
    if os.path.exists(regions_path):
        for farm_id, region in read_regions(regions_path).items():
            if farm_id in farms_dict:
                farms_dict[farm_id]["region"] = region
    return {
        "parameters": read_parameters(
            os.path.join(data_dir, "parameters.csv"), parameter_set
        ),
        "catalogue": catalogue,
        "farms_dict": farms_dict,
        "preferences": read_product_matrix(
            os.path.join(data_dir, "products_preference.csv")
        ),
        "experience": read_product_matrix(os.path.join(data_dir, "farming_years.csv")),
        "networks": read_social_networks(os.path.join(data_dir, "social_networks.csv")),
    }
