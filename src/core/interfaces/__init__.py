"""Core contracts (Protocol) implemented by adapters.

The core depends on these abstractions; the stores, the transport and the
device API are plugged in from `adapters`.
"""
