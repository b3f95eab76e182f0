"""Downloaders: ordered multi-item retrieval of metadata and artifact data."""

from .artifacts import (
    ArtifactDataDownloader,
    ArtifactDownloadResult,
    ArtifactFailurePolicy,
)
from .metadata import MetadataDownloader

__all__ = [
    "ArtifactDataDownloader", "ArtifactDownloadResult", "ArtifactFailurePolicy",
    "MetadataDownloader",
]
