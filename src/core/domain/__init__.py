"""Domain models for the negotiation layer.

- Plain data: connection parameters, request options, device status.
- No HTTP, CLI or file I/O lives here.
"""
