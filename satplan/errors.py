class SATPlanError(Exception):
    """Base exception for all SATplan errors."""
    pass

class FormatError(SATPlanError):
    """Raised when a DIMACS CNF instance is malformed."""
    pass

class TrivialContradictionError(SATPlanError):
    """Raised when an instance is found unsatisfiable while it is being read."""
    pass

class SolverTimeoutError(SATPlanError, TimeoutError):
    """Raised when the SAT solver reaches no decision within its time budget."""
    pass

class SolverError(SATPlanError):
    """Raised when the SAT solver cannot be created or queried."""
    pass

class CNFExchangeError(SATPlanError):
    """Raised when writing or reading the CNF instance file fails."""
    pass

class PlanValidationError(SATPlanError):
    """Raised when a plan cannot be executed from the initial state."""
    pass

class UnsupportedFeatureError(SATPlanError):
    """Raised when a PDDL problem uses a feature outside grounded STRIPS."""
    pass
