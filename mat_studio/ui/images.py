import base64
import logging
import os
from collections import OrderedDict

import requests
from PyQt6.QtCore import QBuffer, QByteArray, QIODevice
from PyQt6.QtGui import QImage

log = logging.getLogger(__name__)

MAX_CACHED_IMAGES = 32

# source -> QImage, or None for sources that failed to load
_cache = OrderedDict()


def image_to_data_uri(path):
    """Read an image file into a data URI (how uploaded backgrounds are stored)."""
    image = QImage(path)
    if image.isNull():
        return None
    data = QByteArray()
    buffer = QBuffer(data)
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    image.save(buffer, "PNG")
    buffer.close()
    return "data:image/png;base64," + base64.b64encode(bytes(data)).decode("ascii")


def _fetch_bytes(source):
    if source.startswith("data:"):
        _, _, payload = source.partition(",")
        return base64.b64decode(payload)
    if source.startswith(("http://", "https://")):
        response = requests.get(source, timeout=15)
        response.raise_for_status()
        return response.content
    with open(os.path.expanduser(source), "rb") as f:
        return f.read()


def _remember(source, image):
    _cache[source] = image
    while len(_cache) > MAX_CACHED_IMAGES:
        _cache.popitem(last=False)
    return image


def load_image(source):
    """
    Decode an image from a data URI, http(s) URL or local path.

    Returns None (after logging) when the source cannot be loaded. Failures
    are cached as well, so a broken URL is only fetched once.
    """
    if not source:
        return None
    if source in _cache:
        _cache.move_to_end(source)
        return _cache[source]
    try:
        raw = _fetch_bytes(source)
    except (OSError, ValueError, requests.RequestException) as e:
        log.error("could not load image %.60s: %s", source, e)
        return _remember(source, None)
    image = QImage()
    if not image.loadFromData(raw):
        log.error("not an image: %.60s", source)
        return _remember(source, None)
    return _remember(source, image)
