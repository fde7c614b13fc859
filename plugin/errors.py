# =============================================================================
# VisualEyes Heatmap Client - Error Taxonomy
# =============================================================================
# Every failure the workflow can surface to the designer.  Each exception
# carries the short user-facing message shown in the toast notification;
# the workflow catches them at its boundary and never lets them escape.
# =============================================================================

from typing import Optional


class VisualEyesError(Exception):
    """
    Base class for workflow failures.

    Args:
        message: User-facing text for the toast. Defaults to the class-level
                 ``user_message``.
        cause:   Underlying exception, kept for logging.
    """

    user_message = "😱 We are deeply sorry, but something went terrible wrong!"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        self.message = message or self.user_message
        self.cause = cause
        super().__init__(self.message)


class NoArtboardSelected(VisualEyesError):
    user_message = "👎 Please select an Artboard"


class MissingApiKey(VisualEyesError):
    user_message = "🤔 Please, set your API key first!"


class InvalidKey(VisualEyesError):
    user_message = "🙄 Your API key is not valid"


class QuotaExceeded(VisualEyesError):
    user_message = "🚨 Your heatmaps limit has been exceeded"


class UpgradeRequired(VisualEyesError):
    user_message = (
        "🛫 In order to access this feature you need to upgrade your account. "
        "Visit https://www.visualeyes.design for more information."
    )


class UnknownServiceError(VisualEyesError):
    pass


class DecodeError(VisualEyesError):
    """Raised when a binary body (e.g. the heatmap image) cannot be read."""
