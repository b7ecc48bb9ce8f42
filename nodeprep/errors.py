"""Exceptions raised while synthesizing node configuration files."""


class NodePrepError(Exception):
    """Base class for all nodeprep errors"""


class ParseError(NodePrepError, ValueError):
    """A kubelet flag value could not be converted to its required type"""

    def __init__(self, flag, value, expected, reason=None):
        self.flag = flag
        self.value = value
        self.expected = expected
        self.reason = reason
        message = f"invalid value {value!r} for flag {flag}: expected {expected}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class SchemaError(NodePrepError):
    """An override object or node pool definition is structurally invalid"""

    def __init__(self, message, field=None):
        self.field = field
        if field:
            message = f"{field}: {message}"
        super().__init__(message)
