"""
Default settings for PyFARMIND.

Settings are plain nested dictionaries. A user-provided dictionary only needs
to contain the entries it wants to overwrite; :func:`merge_settings` fills in
the rest from the defaults below.
"""
from copy import deepcopy

# CONSUMAT parameters of a single parameter set (one row of parameters.csv).
default_pars = {
    "alpha_plus": 0.88,  # [-] value-function curvature for gains
    "alpha_minus": 0.88,  # [-] value-function curvature for losses
    "lambda": 2.25,  # [-] loss aversion
    "phi_plus": 0.0,  # [-] satisfaction threshold
    "phi_minus": 0.1,  # [-] uncertainty threshold
    "a": 1.0,  # learning curve L(e) = 1 / (1 + (b/a) * exp(-k*e))
    "b": 9.0,
    "k": 0.5,
    "name": "default",
}

default_settings = {
    "decision_making": {
        # How ranked activities are turned into a candidate set under
        # deliberation and social comparison.
        #   {"method": "top_k", "k": 3}
        #   {"method": "score_floor", "floor": 1.0}
        "selection": {"method": "top_k", "k": 3},
    },
    "simulation": {
        # "fallback": replace a farm's failed decision with the exit activity.
        # "raise": propagate the error and stop the run.
        "on_error": "fallback",
        # Income assigned to a farm missing from the solver results.
        "missing_income": 0.0,
    },
}


def merge_settings(settings=None, defaults=None) -> dict:
    """
    Recursively overlay `settings` on top of `defaults`.

    Parameters
    ----------
    settings : dict, optional
        User settings. Nested dictionaries are merged key by key.
    defaults : dict, optional
        Defaults to use. Default is `default_settings`.

    Returns
    -------
    dict
        A new dictionary; neither input is modified.
    """
    merged = deepcopy(default_settings if defaults is None else defaults)
    if not settings:
        return merged
    for k, v in settings.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = merge_settings(v, merged[k])
        else:
            merged[k] = deepcopy(v)
    return merged
