class RegistrationError(Exception):
    """Base class of the errors raised by the transformation estimators."""


class InvalidArgumentError(RegistrationError, ValueError):
    """Malformed input: mismatched index counts, out-of-bounds indices or bad shapes.

    Raised before any numeric work is done.
    """


class DegenerateInputError(RegistrationError, RuntimeError):
    """No usable correspondence is left after dropping the invalid points."""
