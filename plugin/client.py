# =============================================================================
# VisualEyes Heatmap Client - Prediction HTTP Client
# =============================================================================
# Provides the PredictionClient class responsible for posting a rendered
# artboard (as a base64 data URL) plus optional AOI polygons to the
# VisualEyes /predict/ endpoint, interpreting the status code and JSON
# envelope into a typed outcome, and downloading the resulting heatmap.
# =============================================================================

import enum
import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

import requests
from pydantic import ValidationError

from plugin import errors
from plugin.codec import decode_binary
from shared.schemas import AoiPolygon, AreaOfInterest, AreaScore, PredictionEnvelope

logger = logging.getLogger(__name__)


class FailureKind(enum.Enum):
    INVALID_KEY = "invalid_key"
    QUOTA_EXCEEDED = "quota_exceeded"
    UPGRADE_REQUIRED = "upgrade_required"
    UNKNOWN = "unknown"


# HTTP status → failure, checked before the body is parsed.
_STATUS_FAILURES = {
    401: FailureKind.INVALID_KEY,
    402: FailureKind.UPGRADE_REQUIRED,
    403: FailureKind.QUOTA_EXCEEDED,
}

_FAILURE_ERRORS = {
    FailureKind.INVALID_KEY: errors.InvalidKey,
    FailureKind.QUOTA_EXCEEDED: errors.QuotaExceeded,
    FailureKind.UPGRADE_REQUIRED: errors.UpgradeRequired,
    FailureKind.UNKNOWN: errors.UnknownServiceError,
}


@dataclass
class PredictionSuccess:
    """
    A heatmap was generated.

    Attributes:
        heatmap_url: Location of the heatmap image.
        areas:       Scores for the submitted areas (may be empty).
    """

    heatmap_url: str
    areas: List[AreaScore] = field(default_factory=list)


@dataclass
class PredictionFailure:
    """
    The prediction call failed.

    Attributes:
        kind:    What went wrong, as far as the client can tell.
        message: User-facing description.
        cause:   Underlying exception (network error, bad JSON), if any.
    """

    kind: FailureKind
    message: str
    cause: Optional[BaseException] = None

    def to_error(self) -> errors.VisualEyesError:
        """Convert into the matching exception from the error taxonomy."""
        return _FAILURE_ERRORS[self.kind](cause=self.cause)


PredictionResponse = Union[PredictionSuccess, PredictionFailure]


def _failure(kind: FailureKind, cause: Optional[BaseException] = None) -> PredictionFailure:
    return PredictionFailure(kind=kind, message=_FAILURE_ERRORS[kind].user_message, cause=cause)


def build_aoi_field(areas: Sequence[AreaOfInterest]) -> str:
    """
    JSON-encode areas as clockwise 4-point polygons for the ``aoi`` field.

    Args:
        areas: Areas with unique ids, in request order.

    Returns:
        str: JSON array of ``{"id", "points": [{"x", "y", "index"}, ...]}``.
    """
    polygons = [AoiPolygon.from_area(area).model_dump() for area in areas]
    return json.dumps(polygons)


class PredictionClient:
    """
    HTTP client for the VisualEyes prediction API.

    Sends a multipart form with the image data URL and optional AOI polygons,
    authorised by ``Token <api key>``. Never raises for service or network
    errors: those come back as a PredictionFailure.

    Args:
        api_url:  Full URL of the predict endpoint.
        platform: Platform tag sent with every request.
        timeout:  Seconds before the transport gives up (None = no limit).
        session:  Optional requests-compatible session (tests pass a
                  FastAPI TestClient here).
    """

    def __init__(
        self,
        api_url: str,
        platform: str = "adobexd",
        timeout: Optional[float] = None,
        session=None,
    ):
        self._api_url = api_url
        self._platform = platform
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()

    @classmethod
    def from_config(cls, config, session=None) -> "PredictionClient":
        return cls(
            api_url=config.api_url,
            platform=config.platform,
            timeout=config.request_timeout_seconds,
            session=session,
        )

    def submit(
        self,
        image_data_url: str,
        api_key: str,
        areas: Sequence[AreaOfInterest] = (),
    ) -> PredictionResponse:
        """
        Submit a rendered artboard for attention prediction.

        Status codes are interpreted before the body: 401 invalid key,
        402 upgrade required, 403 quota exceeded, anything but 200 unknown.
        A 200 whose JSON ``code`` is not ``"success"`` is also unknown.

        Args:
            image_data_url: ``data:image/...;base64,...`` of the artboard.
            api_key:        The user's API key.
            areas:          Areas of interest to score (empty for a plain
                            heatmap).

        Returns:
            PredictionSuccess or PredictionFailure.
        """
        fields = [
            ("isTransparent", (None, "true")),
            ("platform", (None, self._platform)),
            ("image", (None, image_data_url)),
        ]
        if areas:
            fields.append(("aoi", (None, build_aoi_field(areas))))

        headers = {
            "Authorization": f"Token {api_key}",
            "cache-control": "no-cache",
        }

        payload_kb = len(image_data_url) // 1024
        try:
            response = self._session.post(
                self._api_url, files=fields, headers=headers, timeout=self._timeout
            )
        except (requests.exceptions.RequestException, UnicodeError) as exc:
            # Header values must be latin-1; keys are stored unvalidated.
            logger.warning("Prediction request to %s failed: %s", self._api_url, exc)
            return _failure(FailureKind.UNKNOWN, cause=exc)

        status = response.status_code
        if status != 200:
            kind = _STATUS_FAILURES.get(status, FailureKind.UNKNOWN)
            logger.warning("Prediction rejected with HTTP %d (%s)", status, kind.value)
            return _failure(kind)

        try:
            envelope = PredictionEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("Malformed prediction response: %s", exc)
            return _failure(FailureKind.UNKNOWN, cause=exc)

        if envelope.code != "success" or not envelope.url:
            logger.warning(
                "Prediction service reported code=%r (%s)", envelope.code, envelope.message
            )
            return _failure(FailureKind.UNKNOWN)

        logger.info(
            "Prediction succeeded (%d KB payload, %d areas submitted, %d scored)",
            payload_kb, len(areas), len(envelope.aoi),
        )
        return PredictionSuccess(heatmap_url=envelope.url, areas=list(envelope.aoi))

    def fetch_heatmap(self, url: str) -> bytes:
        """
        Download the heatmap image bytes.

        Args:
            url: The ``url`` returned by a successful prediction.

        Returns:
            bytes: Raw image data.

        Raises:
            DecodeError: On a non-200 status, a transport failure, or a body
                         that cannot be read as binary.
        """
        try:
            response = self._session.get(url, timeout=self._timeout)
            if response.status_code != 200:
                raise errors.DecodeError(f"Request had an error: {response.status_code}")
            data = decode_binary(response.content)
        except requests.exceptions.RequestException as exc:
            logger.warning("Failed to download heatmap %s: %s", url, exc)
            raise errors.DecodeError(f"Couldn't fetch heatmap: {exc}", cause=exc) from exc

        logger.info("Downloaded heatmap %s (%d bytes)", url, len(data))
        return data
