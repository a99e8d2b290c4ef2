"""Negotiation core: domain models, contracts and services."""
