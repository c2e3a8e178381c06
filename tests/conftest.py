"""
Pytest configuration and fixtures for the redesign service tests.
"""
import base64
import io

import pytest
from PIL import Image

from redesigner.core.types import GenerationRequest, StyleParameters, UploadedImage
from redesigner.image.provider_config import ProviderConfig


@pytest.fixture
def sample_jpeg_bytes():
    """Raw JPEG bytes of a small beige room stand-in."""
    img = Image.new("RGB", (64, 48), color="beige")
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def sample_data_url(sample_jpeg_bytes):
    return f"data:image/jpeg;base64,{base64.b64encode(sample_jpeg_bytes).decode()}"


@pytest.fixture
def full_params():
    return StyleParameters(
        style="Modern",
        room_type="living room",
        length="5",
        width="4",
        height="3",
        budget="mid",
        wishes="add a reading nook",
    )


@pytest.fixture
def generation_request(sample_jpeg_bytes, full_params):
    return GenerationRequest(
        image=UploadedImage(data=sample_jpeg_bytes, mime_type="image/jpeg", filename="room.jpg"),
        params=full_params,
        prompt="Redesign this living room in Modern style.",
    )


@pytest.fixture
def stability_config():
    return ProviderConfig(provider="stability", stability_api_key="sk-stability-test")


@pytest.fixture
def openai_config():
    return ProviderConfig(provider="openai", openai_api_key="sk-openai-test")
