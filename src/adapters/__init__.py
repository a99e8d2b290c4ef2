"""Concrete adapters: httpx transport, device API and JSON stores."""
