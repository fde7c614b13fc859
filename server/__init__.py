# =============================================================================
# VisualEyes Heatmap Client - Mock Server Package
# =============================================================================
# This package contains a local stand-in for the VisualEyes prediction API:
# request validation, account plans and quotas, and a numpy saliency model
# that produces heatmaps and area scores.
# =============================================================================
