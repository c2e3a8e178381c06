"""Room redesign service.

Accepts a room photograph plus styling parameters and returns a redesigned,
photorealistic render produced by an external image-generation provider.

Package layout:
    - `api`: HTTP and CLI adapters, request normalization, response encoding.
    - `core`: shared data contracts and the request orchestration engine.
    - `prompting`: deterministic prompt construction.
    - `image`: provider configuration, provider adapters, and dispatch.
"""
