from dataclasses import asdict, dataclass

from ..utility.errors import InconsistentMemoryError


class Person:
    """
    The decision maker of a farm.

    Parameters
    ----------
    age : int
        Age of the farm head [yr].
    education : int
        Education level (category code).
    memory : int
        Number of past years of income the person retains. Must be at least 2,
        i.e., the most recent income plus one reference year.
    entrepreneurship : float
        Entrepreneurship (risk tolerance) score, expected in [0, 1]. It weights
        how strongly unfamiliar activities are considered when re-ranking.

    Notes
    -----
    Only the age changes during a simulation (see :meth:`grow_older`).
    """

    __slots__ = ("_age", "_education", "_memory", "_entrepreneurship")

    def __init__(self, age, education, memory, entrepreneurship):
        if int(memory) < 2:
            raise InconsistentMemoryError(
                f"Memory must be at least 2 years, got {memory}."
            )
        self._age = int(age)
        self._education = int(education)
        self._memory = int(memory)
        self._entrepreneurship = float(entrepreneurship)

    @property
    def age(self):
        return self._age

    @property
    def education(self):
        return self._education

    @property
    def memory(self):
        return self._memory

    @property
    def entrepreneurship(self):
        return self._entrepreneurship

    def grow_older(self, years=1):
        self._age += years
        return self._age

    def to_dict(self) -> dict:
        return {
            "age": self._age,
            "education": self._education,
            "memory": self._memory,
            "entrepreneurship": self._entrepreneurship,
        }

    def __repr__(self):
        return (
            f"Person(age={self._age}, education={self._education}, "
            f"memory={self._memory}, entrepreneurship={self._entrepreneurship})"
        )


@dataclass(frozen=True)
class Parameters:
    """
    Simulation-wide CONSUMAT parameters.

    Parameters
    ----------
    alpha_plus : float
        Value-function curvature for gains.
    alpha_minus : float
        Value-function curvature for losses.
    lambda_ : float
        Loss-aversion multiplier.
    phi_plus : float
        Satisfaction threshold.
    phi_minus : float
        Uncertainty threshold.
    a, b, k : float
        Learning-curve constants, L(e) = 1 / (1 + (b / a) * exp(-k * e)).
    name : str
        Identifier of the parameter set.

        >>> # A sample pars dictionary
        >>> pars = {
        >>>     "alpha_plus": 0.88,
        >>>     "alpha_minus": 0.88,
        >>>     "lambda": 2.25,
        >>>     "phi_plus": 0.0,
        >>>     "phi_minus": 0.1,
        >>>     "a": 1.0,
        >>>     "b": 9.0,
        >>>     "k": 0.5,
        >>>     "name": "baseline"
        >>>     }
    """

    alpha_plus: float
    alpha_minus: float
    lambda_: float
    phi_plus: float
    phi_minus: float
    a: float
    b: float
    k: float
    name: str = "default"

    def __post_init__(self):
        if self.a == 0:
            raise ValueError("Learning-curve constant 'a' must be non-zero.")

    @classmethod
    def from_dict(cls, pars: dict):
        """Build parameters from a pars dictionary (accepts 'lambda' or 'lambda_')."""
        pars = dict(pars)
        if "lambda" in pars:
            pars["lambda_"] = pars.pop("lambda")
        return cls(
            alpha_plus=float(pars["alpha_plus"]),
            alpha_minus=float(pars["alpha_minus"]),
            lambda_=float(pars["lambda_"]),
            phi_plus=float(pars["phi_plus"]),
            phi_minus=float(pars["phi_minus"]),
            a=float(pars["a"]),
            b=float(pars["b"]),
            k=float(pars["k"]),
            name=str(pars.get("name", "default")),
        )

    def to_dict(self) -> dict:
        d = asdict(self)
        d["lambda"] = d.pop("lambda_")
        return d
