class SequenceError(Exception):
    """base class for every error raised by the engine itself"""
    pass


class ClosedSequenceError(SequenceError, RuntimeError):
    """an operation was invoked on a handle that is no longer open"""
    pass


class InvalidArgumentError(SequenceError, ValueError):
    """a stage, terminal or config parameter is malformed"""
    pass


class NoValueError(SequenceError, LookupError):
    """a value was requested from an empty option"""
    pass
