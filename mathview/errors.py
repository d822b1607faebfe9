"""Exceptions raised by the numeric core."""


class MathViewError(Exception):
    """Base class; the message is meant to be shown to the user as-is."""


class CompileError(MathViewError):
    """A formula string could not be turned into an expression."""


class EvaluationError(MathViewError):
    """An expression failed to evaluate at a given x."""


class IntegrationError(MathViewError):
    pass


class InvalidBoundsError(IntegrationError, ValueError):
    pass


class NonFiniteEndpointError(IntegrationError):
    pass
