"""Test utilities for relay sessions.

RelayTestClient is imported from its submodule on first access so that
httpx is only loaded when tests need it.
"""

__all__ = ["RelayTestClient"]


def __getattr__(name: str):
    if name == "RelayTestClient":
        from llming_widgets.testing.relay_test_client import RelayTestClient
        return RelayTestClient
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
