import pytest
import requests
from PyQt6.QtGui import QColor, QImage

from mat_studio.ui import images


@pytest.fixture(autouse=True)
def empty_cache():
    images._cache.clear()
    yield
    images._cache.clear()


@pytest.fixture
def failing_get(monkeypatch):
    calls = []

    def get(url, timeout=None):
        calls.append(url)
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(images.requests, "get", get)
    return calls


def test_failed_url_is_fetched_once(qapp, failing_get):
    for _ in range(3):
        assert images.load_image("https://example.invalid/card.png") is None
    assert failing_get == ["https://example.invalid/card.png"]


def test_undecodable_bytes_are_cached_as_missing(qapp, tmp_path):
    path = tmp_path / "notes.png"
    path.write_bytes(b"not really a png")
    assert images.load_image(str(path)) is None
    path.unlink()
    # served from the cache, the file is no longer read
    assert images.load_image(str(path)) is None
    assert str(path) in images._cache


def test_cache_evicts_least_recently_used(qapp, failing_get, monkeypatch):
    monkeypatch.setattr(images, "MAX_CACHED_IMAGES", 2)
    images.load_image("https://a.invalid/1.png")
    images.load_image("https://a.invalid/2.png")
    images.load_image("https://a.invalid/1.png")
    images.load_image("https://a.invalid/3.png")

    assert list(images._cache) == ["https://a.invalid/1.png", "https://a.invalid/3.png"]
    assert len(failing_get) == 3


def test_uploaded_file_loads_from_its_data_uri(qapp, tmp_path):
    source = QImage(4, 3, QImage.Format.Format_ARGB32)
    source.fill(QColor("red"))
    path = tmp_path / "swatch.png"
    source.save(str(path))

    uri = images.image_to_data_uri(str(path))
    assert uri.startswith("data:image/png;base64,")
    image = images.load_image(uri)
    assert (image.width(), image.height()) == (4, 3)
    assert images.load_image(uri) is image
