from types import MappingProxyType

import numpy as np
import pandas as pd


class SocialNetwork:
    """
    A farm's weighted view of its peers.

    The owning farm is the implicit root and every edge leads from the root to
    a peer. Only weight lookups and iteration are required, so the graph is
    kept as a plain mapping from peer id to edge weight.

    Parameters
    ----------
    root : str
        Id of the farm owning the network.
    weights : dict
        Peer id -> non-negative edge weight (trust/influence). An entry for the
        root itself is ignored.

        >>> network = SocialNetwork("farm1", {"farm2": 0.7, "farm3": 0.3})
        >>> network.weight("farm2")
        0.7

    Notes
    -----
    Edge weights are read-only after construction.
    """

    def __init__(self, root, weights: dict):
        self.root = root
        clean = {}
        for peer, w in weights.items():
            if peer == root:
                continue
            w = float(w)
            if not np.isfinite(w) or w < 0:
                raise ValueError(
                    f"Edge weight between {root} and {peer} must be a non-negative number, got {w}."
                )
            clean[peer] = w
        self._weights = MappingProxyType(clean)

    @property
    def weights(self):
        return self._weights

    def weight(self, peer) -> float:
        return self._weights.get(peer, 0.0)

    def neighbors(self) -> list:
        """Peers with a positive edge weight, sorted by id."""
        return sorted(p for p, w in self._weights.items() if w > 0)

    def items(self):
        return self._weights.items()

    def __contains__(self, peer):
        return peer in self._weights

    def __len__(self):
        return len(self._weights)

    def strongest(self, scores=None, candidates=None):
        """
        Return the most influential neighbor.

        Parameters
        ----------
        scores : dict, optional
            Peer id -> influence score. If None, the edge weights are used.
        candidates : iterable, optional
            Restrict the search to these peers. Default is all neighbors.

        Returns
        -------
        str or None
            The peer with the highest score, ties broken by the lowest id.
            None if no neighbor is available.
        """
        if candidates is None:
            candidates = self.neighbors()
        if scores is None:
            scores = self._weights
        best = None
        for peer in sorted(candidates):
            if peer not in scores:
                continue
            if best is None or scores[peer] > scores[best]:
                best = peer
        return best

    def weighted_average(self, rows: dict) -> np.ndarray:
        """
        Blend peer vectors with the edge weights.

        Parameters
        ----------
        rows : dict
            Peer id -> numeric vector. Peers without a positive weight are
            ignored.

        Returns
        -------
        np.ndarray
            sum_j(w_j * row_j) / sum_j(w_j). None if no weighted peer is given.
        """
        peers = [p for p in self.neighbors() if p in rows]
        if not peers:
            return None
        w = np.array([self._weights[p] for p in peers])
        m = np.vstack([np.asarray(rows[p], dtype=float) for p in peers])
        return w @ m / w.sum()

    def to_dict(self) -> dict:
        return dict(self._weights)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> dict:
        """
        Build one network per row of a square weight table.

        Parameters
        ----------
        df : pd.DataFrame
            Index: root farm ids. Columns: peer farm ids. Values: edge weights.

        Returns
        -------
        dict
            Farm id -> SocialNetwork.
        """
        return {
            str(root): cls(str(root), {str(k): v for k, v in row.items()})
            for root, row in df.iterrows()
        }
