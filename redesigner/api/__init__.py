"""API adapter package.

Architectural role:
- Defines the external interaction boundary (HTTP and CLI).
- Performs request normalization and response shaping.
- Delegates generation to `redesigner.core.engine`.
"""
