"""
Error taxonomy for suiparse.

Transport and RPC errors come from talking to the node, parse errors
from the payload it returned. Callers that only care about "something
went wrong" can catch SuiParseError.
"""

from typing import Any, Optional


class SuiParseError(Exception):
    """Base exception for all suiparse errors."""


class TransportError(SuiParseError):
    """HTTP request failed or the body was not a JSON-RPC envelope."""


class RpcError(SuiParseError):
    """The node answered with a JSON-RPC error member."""

    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"rpc error {code}: {message}")


class MissingResultError(SuiParseError):
    """JSON-RPC envelope carried neither a result nor an error."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"rpc response for {method} missing result field")


class ParseError(SuiParseError):
    """Base class for payload parsing failures."""


class MissingGasUsage(ParseError):
    """Transaction response has no effects.gasUsed section."""

    def __init__(self):
        super().__init__("transaction response does not include gas usage information")


class InvalidPayload(ParseError):
    """Structured value does not have the expected shape."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"transaction payload could not be deserialized: {reason}")
