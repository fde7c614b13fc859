# =============================================================================
# VisualEyes Heatmap Client - Plugin Package
# =============================================================================
# This package contains the design-side components: AOI validation, artboard
# rendering, the prediction API client, the credential store, and the
# workflow that applies heatmaps and attention scores back onto the design.
# =============================================================================
