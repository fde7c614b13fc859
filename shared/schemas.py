# =============================================================================
# VisualEyes Heatmap Client - Shared API Schemas
# =============================================================================
# Pydantic models defining the data contracts between the plugin and the
# prediction service (the real VisualEyes API or the local mock server).
#
# The plugin posts a multipart form, so the request side is described here
# only for its structured part: the JSON-encoded ``aoi`` field, a list of
# clockwise 4-point polygons starting at the top-left corner.  The response
# side is a plain JSON envelope.
# =============================================================================

from pydantic import BaseModel, Field
from typing import List, Optional


class AreaOfInterest(BaseModel):
    """
    A designer-marked rectangle flagged for individual attention scoring.

    Attributes:
        id:     Guid of the layer the area was captured from.
        color:  Hex color used when drawing the score overlay.
        x, y:   Top-left corner in artboard coordinates.
        width:  Width in pixels.
        height: Height in pixels.
        score:  Attention score (percent), set after a successful prediction.
    """

    id: str
    color: str
    x: float
    y: float
    width: float
    height: float
    score: Optional[float] = None


class AoiPoint(BaseModel):
    """One polygon vertex, tagged with its position in the clockwise walk."""

    x: float
    y: float
    index: int


class AoiPolygon(BaseModel):
    """
    Polygon form of an AreaOfInterest as sent in the ``aoi`` form field.

    Attributes:
        id:     AreaOfInterest id, echoed back by the service.
        points: Four vertices, clockwise from the top-left corner.
    """

    id: str
    points: List[AoiPoint] = Field(..., min_length=4, max_length=4)

    @classmethod
    def from_area(cls, area: AreaOfInterest) -> "AoiPolygon":
        x, y, w, h = area.x, area.y, area.width, area.height
        return cls(
            id=area.id,
            points=[
                AoiPoint(x=x, y=y, index=0),
                AoiPoint(x=x + w, y=y, index=1),
                AoiPoint(x=x + w, y=y + h, index=2),
                AoiPoint(x=x, y=y + h, index=3),
            ],
        )


class AreaScore(BaseModel):
    """Attention score returned for one requested area."""

    id: str
    score: float


class PredictionEnvelope(BaseModel):
    """
    JSON body returned by ``POST /predict/``.

    Attributes:
        code: ``"success"`` when a heatmap was produced; anything else is an
              error reported by the service.
        url:  Location of the generated heatmap image.
        aoi:  Per-area scores, present only when areas were submitted.
    """

    code: str
    url: Optional[str] = None
    aoi: List[AreaScore] = Field(default_factory=list)
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """Status payload of the mock server's ``/health`` endpoint."""

    status: str
    heatmaps_stored: int
    uptime_seconds: float
