"""pymint: asyncio client for the Mint API."""

from pymint.client import CircuitBreaker, CircuitState, RequestDescriptor, RequestExecutor, RetryPolicy
from pymint.core.config import Config
from pymint.kernel.exceptions import (
    CircuitOpenException,
    InvalidArgumentException,
    MintException,
    NotAuthorizedException,
    OperationTimeoutException,
    ResponseParseException,
    TransientFailureException,
    TransportException,
)
from pymint.mint import MintClient, merge_by_key
from pymint.session import Credentials, SessionState

__version__ = "0.1.0"

__all__ = [
    "CircuitBreaker",
    "CircuitOpenException",
    "CircuitState",
    "Config",
    "Credentials",
    "InvalidArgumentException",
    "MintClient",
    "MintException",
    "NotAuthorizedException",
    "OperationTimeoutException",
    "RequestDescriptor",
    "RequestExecutor",
    "ResponseParseException",
    "RetryPolicy",
    "SessionState",
    "TransientFailureException",
    "TransportException",
    "merge_by_key",
]
