"""Shared fixtures: config in tmp dirs, fake HTTP sessions, sample documents."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from config import Config
from plugin.credentials import CredentialStore
from plugin.notify import Notifier
from plugin.scene import Artboard, Document, Rectangle, SceneEditor, SolidColor, Text

API_URL = "https://www.visualeyes.design/predict/"


def png_bytes(size=(8, 8), color=(255, 0, 0, 128)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b"", json_error=None):
        self.status_code = status_code
        self._payload = payload
        self.content = content
        self._json_error = json_error

    def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload


class FakeSession:
    """Records calls; answers POSTs with ``post_response`` and GETs by URL."""

    def __init__(self, post_response=None, post_error=None, get_responses=None, get_error=None):
        self.post_response = post_response
        self.post_error = post_error
        self.get_responses = get_responses or {}
        self.get_error = get_error
        self.posts = []
        self.gets = []

    def post(self, url, **kwargs):
        self.posts.append((url, kwargs))
        if self.post_error is not None:
            raise self.post_error
        return self.post_response

    def get(self, url, **kwargs):
        self.gets.append((url, kwargs))
        if self.get_error is not None:
            raise self.get_error
        return self.get_responses.get(url, FakeResponse(status_code=404))

    def form_fields(self, index=0):
        """Decode the multipart fields of a recorded POST into a dict."""
        _, kwargs = self.posts[index]
        return {name: value for name, (_, value) in kwargs["files"]}


@pytest.fixture
def config(tmp_path, monkeypatch):
    for key in ("VISUALEYES_API_URL", "VISUALEYES_DATA_DIR", "VISUALEYES_TEMP_DIR"):
        monkeypatch.delenv(key, raising=False)
    return Config(
        api_url=API_URL,
        data_dir=str(tmp_path / "data"),
        temp_dir=str(tmp_path / "tmp"),
    )


@pytest.fixture
def store(config):
    store = CredentialStore.from_config(config)
    store.set("demo-key")
    return store


@pytest.fixture
def notifier():
    return Notifier(duration_seconds=5.0)


def make_document(aoi_layers=()) -> Document:
    artboard = Artboard(
        name="Home",
        width=400,
        height=300,
        children=[
            Rectangle(name="Hero", x=20, y=20, width=360, height=120,
                      fill=SolidColor(color="#202040")),
            Text(name="Title", x=40, y=200, text="Sign up today", font_size=24,
                 fill=SolidColor(color="#111111")),
            *aoi_layers,
        ],
    )
    return Document(artboards=[artboard], selection=[artboard.guid])


@pytest.fixture
def document():
    return make_document(
        aoi_layers=[
            Rectangle(guid="a1", name="AOI", x=20, y=20, width=200, height=100,
                      fill=SolidColor(color="#FF0000")),
        ]
    )


@pytest.fixture
def editor(document):
    return SceneEditor(document)
