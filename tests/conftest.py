"""
Test configuration and fixtures for ChromaLens tests.
"""
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from chromalens.main import app
from chromalens.utils.metrics import reset_metrics


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics_between_tests():
    """Reset metrics before each test."""
    reset_metrics()


def encode_png(rgba: np.ndarray) -> bytes:
    """Encode an (H, W, 4) uint8 array as PNG bytes."""
    buffer = io.BytesIO()
    Image.fromarray(rgba.astype(np.uint8)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_factory():
    """Return a helper that encodes RGBA arrays as PNG bytes."""
    return encode_png


@pytest.fixture
def two_color_png():
    """60x40 image: left two thirds red, right third blue."""
    img = np.zeros((40, 60, 4), dtype=np.uint8)
    img[..., 3] = 255
    img[:, :40, :3] = (255, 0, 0)
    img[:, 40:, :3] = (0, 0, 255)
    return encode_png(img)


@pytest.fixture
def transparent_png():
    """Fully transparent 32x32 image."""
    return encode_png(np.zeros((32, 32, 4), dtype=np.uint8))
