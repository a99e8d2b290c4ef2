"""Core services: connection negotiation and its wiring."""
