"""Image generation adapter package.

Scope:
    Provider configuration, the `ImageProvider` adapters for Stability AI
    (image-to-image) and OpenAI Images (edit with generate fallback), and the
    dispatcher that picks one per deployment.

Non-goals:
    - No inbound request parsing.
    - No response encoding for callers.
    - No persistence of generated images.
"""
