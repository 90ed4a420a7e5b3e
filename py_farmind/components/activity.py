from dataclasses import dataclass


@dataclass(frozen=True)
class Activity:
    """
    A farm production activity (a crop or a livestock branch).

    Parameters
    ----------
    id : int
        Identifier of the activity in the master list.
    name : str
        Name of the activity (e.g., "wheat", "dairy").

    Notes
    -----
    Activities are immutable values. Two activities are equal when both id and
    name match. Use :meth:`matches` to compare against a bare id or name.
    """

    id: int
    name: str

    def matches(self, other) -> bool:
        """Return True if `other` (Activity, id, or name) refers to this activity."""
        if isinstance(other, Activity):
            return other == self
        if isinstance(other, str):
            return other == self.name
        return other == self.id

    def __str__(self):
        return self.name


# Reserved sentinel: the farm ceases production.
EXIT_ACTIVITY = Activity(0, "exit_activity")


class ActivityCatalogue:
    """
    The closed master list of activities available in a simulation.

    Parameters
    ----------
    activities : list
        A list of Activity objects or (id, name) tuples. The exit activity is
        always part of the catalogue and does not need to be listed.

        >>> catalogue = ActivityCatalogue([(1, "wheat"), (2, "maize")])
        >>> catalogue["maize"]
        Activity(id=2, name='maize')
    """

    def __init__(self, activities):
        self._by_name = {}
        self._by_id = {}
        for act in activities:
            if not isinstance(act, Activity):
                act = Activity(int(act[0]), str(act[1]))
            if act.name in self._by_name or act.id in self._by_id:
                raise ValueError(f"Duplicated activity {act} in the master list.")
            self._by_name[act.name] = act
            self._by_id[act.id] = act
        if EXIT_ACTIVITY.name not in self._by_name:
            self._by_name[EXIT_ACTIVITY.name] = EXIT_ACTIVITY
            self._by_id.setdefault(EXIT_ACTIVITY.id, EXIT_ACTIVITY)

    def __getitem__(self, key) -> Activity:
        if isinstance(key, Activity):
            key = key.name
        if isinstance(key, str):
            return self._by_name[key]
        return self._by_id[key]

    def __contains__(self, key):
        try:
            self[key]
        except KeyError:
            return False
        return True

    def __iter__(self):
        return iter(self._by_name.values())

    def __len__(self):
        return len(self._by_name)

    @property
    def names(self) -> list:
        """Activity names in master-list order (exit activity excluded)."""
        return [n for n in self._by_name if n != EXIT_ACTIVITY.name]

    def resolve(self, names) -> list:
        """
        Convert a list of activity names into Activity objects.

        Parameters
        ----------
        names : list
            Activity names (or Activity objects).

        Returns
        -------
        list
            Activities in the given order with duplicates removed.
        """
        resolved = []
        for name in names:
            act = self[name]
            if act not in resolved:
                resolved.append(act)
        return resolved
