"""
app/mappers package marker.
"""

from app.mappers.header_normalizer import HeaderMapping, normalize_headers

__all__ = [
    "HeaderMapping",
    "normalize_headers",
]
