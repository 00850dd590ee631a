class CompileError(RuntimeError):
    """Base class for every failure the driver reports."""


class SourceError(CompileError):
    pass


class ParseError(CompileError):
    def __init__(self, message, token=None):
        super().__init__(message)
        self.token = token


class SemanticError(CompileError):
    pass


class BackendError(CompileError):
    pass


def location(source, pos):
    """Turn a source offset into a 1-based (line, column) pair."""
    line = source.count('\n', 0, pos) + 1
    col = pos - (source.rfind('\n', 0, pos) + 1) + 1
    return line, col
