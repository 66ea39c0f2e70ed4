"""
Request body generation for dependency graphs.
"""

from .cyclonedx_formatter import CycloneDXFormatter, CYCLONEDX_MEDIA_TYPE

__all__ = [
    "CycloneDXFormatter",
    "CYCLONEDX_MEDIA_TYPE"
]
