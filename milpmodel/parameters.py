"""
Parameters class for MILP solver backends
"""


class Parameters:
    """
    Configuration parameters for the MILP solver.

    Attributes
    ----------
    time_limit : float
        Maximum solve time in seconds (default: 3600.0)
    mip_rel_gap : float
        Relative optimality gap at which branch-and-bound stops
        (default: 1e-4)
    node_limit : int or None
        Maximum number of branch-and-bound nodes (default: None, no limit)
    presolve : bool
        Enable presolve (default: True)
    verbose : bool
        Print solver progress (default: False)

    Examples
    --------
    >>> param = Parameters()
    >>> param.time_limit = 30.0
    >>> param.mip_rel_gap = 0.0
    """

    def __init__(self):
        self.time_limit = 3600.0
        self.mip_rel_gap = 1e-4
        self.node_limit = None
        self.presolve = True
        self.verbose = False

    def __repr__(self):
        return (f"Parameters(time_limit={self.time_limit}, "
                f"mip_rel_gap={self.mip_rel_gap}, "
                f"node_limit={self.node_limit}, "
                f"presolve={self.presolve})")

    def to_solver_options(self):
        """Convert to the options dict accepted by scipy.optimize.milp"""
        options = {
            'disp': bool(self.verbose),
            'presolve': bool(self.presolve),
            'mip_rel_gap': float(self.mip_rel_gap),
        }
        if self.time_limit is not None:
            options['time_limit'] = float(self.time_limit)
        if self.node_limit is not None:
            options['node_limit'] = int(self.node_limit)
        return options

    @classmethod
    def from_dict(cls, d):
        """Create Parameters from dictionary"""
        param = cls()
        for key, value in d.items():
            if hasattr(param, key):
                setattr(param, key, value)
        return param

    def to_dict(self):
        """Convert to dictionary"""
        return {
            'time_limit': self.time_limit,
            'mip_rel_gap': self.mip_rel_gap,
            'node_limit': self.node_limit,
            'presolve': self.presolve,
            'verbose': self.verbose,
        }
