"""Content processing layers for the Drishti workspace."""

# Note: Import layers individually to avoid circular imports
# Use: from drishti.layers.layer1_normalization import normalize_prd
# Use: from drishti.layers.layer2_roadmap import to_roadmap

__all__ = [
    "layer1_normalization",
    "layer2_roadmap",
]
