# =============================================================================
# VisualEyes Heatmap Client - Shared Package
# =============================================================================
# Wire schemas used by both the plugin client and the mock prediction server.
# =============================================================================
