"""Stateless components. Dependencies are injected as ports."""
