class ValidationError(ValueError):
    """A machine definition or its textual notation is malformed.

    Raised before any simulation or transformation runs. ``line`` is the
    1-based editor line the problem was found on, when there is one.
    """

    def __init__(self, message, line=None):
        self.line = line
        if line is not None:
            message = f"[Line {line}] {message}"
        super().__init__(message)
