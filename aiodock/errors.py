"""Fatal workflow errors."""


class FatalError(RuntimeError):
    """A precondition failed and the run must stop with a non-zero exit.

    Raised by library code; command handlers log it and exit 1.
    """
