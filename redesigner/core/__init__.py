"""Core orchestration package.

Architectural role:
    Sits between the API/CLI adapters and the provider layer.

Composition:
    - `types`: request/result data contracts shared across the pipeline.
    - `engine`: prompt resolution plus dispatch for one redesign request.

Determinism and side effects:
    Package import is side-effect free. Network side effects happen only in the
    provider adapters reached through `engine.process_redesign`.
"""
