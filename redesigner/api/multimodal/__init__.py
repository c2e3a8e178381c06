"""Inbound payload normalization for API adapters.

Architectural role:
- Converts multipart uploads and base64 data URLs into an `UploadedImage`.
- Applies field-name, encoding, and size constraints before any provider call.
"""
