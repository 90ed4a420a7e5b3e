import time


def get_agt_attr(attr_str):
    """Get a nested attribute from an agent object.

    This replaces, e.g., lambda a: getattr(a, "satisfaction", None)
    so that None is returned if the attribute does not exist.

    Parameters
    ----------
    attr_str : str
        A string of nested attributes separated by a period (e.g.,
        "history.current").

    Returns
    -------
    function
        A function that returns the nested attribute of an agent.
    """

    def get_nested_attr(obj):
        def get_nested_attr_(obj, attr_str):
            attrs = attr_str.split(".", 1)
            current_attr = getattr(obj, attrs[0], None)
            if len(attrs) == 1 or current_attr is None:
                return current_attr
            return get_nested_attr_(current_attr, attrs[1])

        return get_nested_attr_(obj, attr_str)

    return get_nested_attr


def get_activity_names(attr_str):
    """Like :func:`get_agt_attr` but converts a list of activities into names."""
    getter = get_agt_attr(attr_str)

    def func(agent):
        activities = getter(agent)
        if activities is None:
            return None
        return [act.name for act in activities]

    return func


class TimeRecorder:
    """A class for recording time."""

    def __init__(self):
        self.start = time.monotonic()
        self.records = {}

    def get_elapsed_time(self, event=None, strf=True):
        """Get elapsed time since the start of the recorder.

        Parameters
        ----------
        event : str, optional
            Record event, by default None.
        strf : bool, optional
            Convert seconds to string format, by default True.

        Returns
        -------
        float or str
        Elapsed time or string format of the elapsed time.
        """
        elapsed_time = time.monotonic() - self.start
        if strf:
            elapsed_time = time.strftime("%H:%M:%S", time.gmtime(elapsed_time))
        if event is not None:
            self.records[event] = elapsed_time
        return elapsed_time
