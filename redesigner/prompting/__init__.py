"""Prompting package.

Deterministic prompt-construction helpers for redesign requests. No provider
selection, transport, or input parsing happens here.
"""
