"""Error kinds raised inside the subtitle pipeline."""
from __future__ import annotations


class PipelineError(Exception):
    """Base class for failures the pipeline converts into empty results."""


class ConfigurationError(PipelineError):
    """A required setting is missing or invalid."""


class ProviderUnavailable(PipelineError):
    """The subtitle search provider could not be reached or answered with an error."""


class ProviderEmpty(PipelineError):
    """The subtitle search provider returned no results."""


class FetchFailure(PipelineError):
    """A subtitle file could not be downloaded."""


class TranslationFailure(PipelineError):
    """The generative provider failed or returned unusable text."""


class StorageFailure(PipelineError):
    """The translated file could not be stored or signed."""
