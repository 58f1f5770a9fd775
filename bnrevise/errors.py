"""Exceptions raised by bnrevise."""


class InvalidArgumentError(ValueError):
    """
    A malformed distribution, variable or constraint, or one that does not match 
    the network it is applied to. Never corrected silently.
    """


class NonConvergenceError(RuntimeError):
    """
    An iterative procedure exhausted its iteration budget before the 
    convergence threshold was met.

    iterations: how many iterations were completed
    distance: the last observed distance (total variation between iterations)
    """

    def __init__(self, message: str, iterations: int, distance: float):
        super().__init__(f"{message} (iterations={iterations}, distance={distance:.6g})")
        self.iterations = iterations
        self.distance = distance
