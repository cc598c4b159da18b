"""pymint testing: test doubles for the Mint client."""

from pymint.testing.transport import StubTransport

__all__ = ["StubTransport"]
