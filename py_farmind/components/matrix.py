import numpy as np
import pandas as pd

from ..utility.errors import UnknownFarmError


class FarmProductMatrix:
    """
    A farm x activity table of integer scores.

    The same structure is used for the preference matrix (subjective
    preference per activity) and the experience matrix (years of experience
    per activity).

    Parameters
    ----------
    product_names : list
        Activity names giving the shared column order.
    rows : dict
        A dictionary with farm ids as keys and integer vectors (one value per
        product name) as values.

        >>> matrix = FarmProductMatrix(
        >>>     ["wheat", "maize", "dairy"],
        >>>     {"farm1": [3, 1, 0], "farm2": [1, 2, 5]}
        >>>     )
        >>> matrix.get("farm2", "dairy")
        5
    """

    def __init__(self, product_names, rows: dict):
        self.product_names = list(product_names)
        self._index = {name: i for i, name in enumerate(self.product_names)}
        if len(self._index) != len(self.product_names):
            raise ValueError("Product names must be unique.")
        n = len(self.product_names)
        self._rows = {}
        for farm_id, values in rows.items():
            values = np.asarray(values, dtype=int)
            if values.shape != (n,):
                raise ValueError(
                    f"Row of {farm_id} has {values.size} values but {n} products are defined."
                )
            self._rows[farm_id] = values.copy()

    @property
    def farm_ids(self) -> list:
        return list(self._rows)

    def index(self, product) -> int:
        """Column index of a product (KeyError if unknown)."""
        try:
            return self._index[product]
        except KeyError:
            raise KeyError(f"Unknown product '{product}'.") from None

    def _row(self, farm_id):
        try:
            return self._rows[farm_id]
        except KeyError:
            raise UnknownFarmError("Farm is not in the matrix.", farm_id=farm_id) from None

    def get(self, farm_id, product) -> int:
        return int(self._row(farm_id)[self.index(product)])

    def set(self, farm_id, product, value):
        self._row(farm_id)[self.index(product)] = int(value)

    def increment(self, farm_id, product, by=1) -> int:
        row = self._row(farm_id)
        i = self.index(product)
        row[i] += by
        return int(row[i])

    def row(self, farm_id) -> np.ndarray:
        """Return a copy of the farm's vector."""
        return self._row(farm_id).copy()

    def __contains__(self, farm_id):
        return farm_id in self._rows

    def __len__(self):
        return len(self._rows)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame.from_dict(
            self._rows, orient="index", columns=self.product_names
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame):
        """Build a matrix from a data frame indexed by farm id."""
        return cls(
            product_names=list(df.columns),
            rows={str(fid): row.to_numpy() for fid, row in df.iterrows()},
        )
