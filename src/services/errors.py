"""Errors raised by the recipe ingestion pipeline."""


class IngestionError(Exception):
    """Fatal failure of one ingestion attempt."""


class MediaDownloadError(IngestionError):
    """The source video could not be downloaded."""


class ContentExtractionError(IngestionError):
    """The content-understanding service returned no usable recipe."""


class EmbeddingError(IngestionError):
    """The recipe embedding could not be generated."""


class ArtifactError(Exception):
    """A best-effort artifact (thumbnail, narration) could not be produced."""
