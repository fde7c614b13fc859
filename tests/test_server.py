"""Contract tests against the in-process mock prediction server."""

import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from plugin.client import FailureKind, PredictionClient, PredictionFailure, PredictionSuccess
from plugin.codec import encode_to_data_url
from plugin.scene import SceneEditor
from plugin.workflow import HeatmapWorkflow
from server.app import Account, create_app
from server.heatmap import area_scores, saliency_map
from shared.schemas import AoiPolygon, AreaOfInterest

MOCK_URL = "http://testserver/predict/"


def jpeg_data_url(size=(200, 100)):
    image = Image.new("RGB", size, (255, 255, 255))
    image.paste((0, 0, 0), (20, 20, 80, 80))
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=100)
    return encode_to_data_url(buffer.getvalue(), "image/jpg")


def make_client(**app_kwargs):
    session = TestClient(create_app(**app_kwargs))
    return PredictionClient(MOCK_URL, session=session), session


def test_health():
    _, session = make_client()
    response = session.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_echo_server_returns_uploaded_bytes():
    client, _ = make_client(echo=True)
    original = bytes(range(256)) * 3

    result = client.submit(encode_to_data_url(original, "image/jpg"), "demo-key")

    assert isinstance(result, PredictionSuccess)
    assert client.fetch_heatmap(result.heatmap_url) == original


def test_generated_heatmap_and_scores():
    client, _ = make_client()
    area = AreaOfInterest(id="a1", color="#FF0000", x=20, y=20, width=60, height=60)

    result = client.submit(jpeg_data_url(), "demo-key", [area])

    assert isinstance(result, PredictionSuccess)
    [score] = result.areas
    assert score.id == "a1"
    assert 0 <= score.score <= 100

    with Image.open(io.BytesIO(client.fetch_heatmap(result.heatmap_url))) as heatmap:
        assert heatmap.size == (200, 100)
        assert heatmap.mode == "RGBA"


@pytest.mark.parametrize(
    "accounts, key, areas, kind",
    [
        (None, "wrong-key", [], FailureKind.INVALID_KEY),
        ({"k": Account(plan="free")}, "k", ["a1"], FailureKind.UPGRADE_REQUIRED),
        ({"k": Account(plan="pro", quota=0)}, "k", [], FailureKind.QUOTA_EXCEEDED),
    ],
)
def test_account_failures(accounts, key, areas, kind):
    client, _ = make_client(accounts=accounts)
    aois = [AreaOfInterest(id=i, color="#000000", x=0, y=0, width=70, height=32) for i in areas]

    result = client.submit(jpeg_data_url(), key, aois)

    assert isinstance(result, PredictionFailure)
    assert result.kind is kind


def test_free_plan_allows_plain_heatmaps_until_quota_runs_out():
    client, _ = make_client(accounts={"k": Account(plan="free", quota=1)})
    assert isinstance(client.submit(jpeg_data_url(), "k"), PredictionSuccess)
    second = client.submit(jpeg_data_url(), "k")
    assert isinstance(second, PredictionFailure)
    assert second.kind is FailureKind.QUOTA_EXCEEDED


def test_bad_image_is_unknown_failure():
    client, _ = make_client()
    result = client.submit("not a data url", "demo-key")
    assert isinstance(result, PredictionFailure)
    assert result.kind is FailureKind.UNKNOWN


def test_full_workflow_against_mock_server(document, store, notifier, config):
    session = TestClient(create_app())
    client = PredictionClient(MOCK_URL, session=session)
    workflow = HeatmapWorkflow(SceneEditor(document), client, store, notifier, config)

    result = workflow.analyze_areas()

    assert result.ok, result.error
    [area] = result.areas
    assert area.id == "a1"
    assert 0 <= area.score <= 100
    with Image.open(result.heatmap_layer.fill.path) as heatmap:
        assert heatmap.size == (400, 300)


def test_saliency_concentrates_on_contrast():
    image = Image.new("RGB", (200, 100), (255, 255, 255))
    image.paste((0, 0, 0), (150, 40, 190, 90))
    saliency = saliency_map(image)

    assert saliency.max() == pytest.approx(1.0)
    assert saliency.min() >= 0

    def square(pid, x, y):
        return AoiPolygon.model_validate({
            "id": pid,
            "points": [
                {"x": x, "y": y, "index": 0},
                {"x": x + 50, "y": y, "index": 1},
                {"x": x + 50, "y": y + 50, "index": 2},
                {"x": x, "y": y + 50, "index": 3},
            ],
        })

    scores = area_scores(saliency, image.size, [square("busy", 145, 40), square("empty", 0, 0)])
    assert scores["busy"] > scores["empty"]


def test_flat_image_has_zero_saliency():
    saliency = saliency_map(Image.new("RGB", (64, 64), (128, 128, 128)))
    assert not np.any(saliency)
