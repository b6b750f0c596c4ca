"""
Exception hierarchy for milpmodel

Structural modeling errors are programming errors: they are raised while
a model is declared or compiled, never by the solver, and retrying them
cannot succeed. Solver outcomes (infeasible, unbounded, time limit) are
not exceptions; they are reported as a status on the Solution.
"""


class ModelingError(Exception):
    """Base class for structural errors in a model declaration"""


class UnknownVariable(ModelingError, LookupError):
    """
    Raised when a (name, index) pair does not identify a declared variable.

    Parameters
    ----------
    name : str
        Variable family name that was looked up
    index : tuple
        Index tuple that was looked up
    reason : str, optional
        Why the lookup failed
    """

    def __init__(self, name, index, reason=None):
        self.name = name
        self.index = index
        if reason is None:
            reason = "not declared"
        super().__init__(f"Unknown variable {name}{list(index)}: {reason}")


class DuplicateVariable(ModelingError, ValueError):
    """Raised when a variable family name is declared twice in one registry"""


class UnresolvedVariableReference(ModelingError):
    """
    Raised at compile time when an expression references an undeclared variable.

    Attributes
    ----------
    name : str
        Referenced variable family name
    index : tuple
        Referenced index tuple
    location : str
        Where the reference was found (objective or constraint row)
    """

    def __init__(self, name, index, location):
        self.name = name
        self.index = index
        self.location = location
        super().__init__(
            f"{location} references undeclared variable {name}{list(index)}"
        )


class EmptyObjective(ModelingError):
    """Raised at compile time when no objective has been set"""


class NoSolutionAvailable(RuntimeError):
    """
    Raised when values are read from a solution that is not optimal.

    Attributes
    ----------
    status : SolveStatus
        Status reported by the solver
    """

    def __init__(self, status):
        self.status = status
        label = getattr(status, 'value', status)
        super().__init__(f"No solution available: solver status is '{label}'")
