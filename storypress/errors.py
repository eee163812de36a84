"""Error types raised by the publishing pipeline."""

from __future__ import annotations


class StorypressError(Exception):
    """Base class for every error the pipeline raises on purpose."""


class ProjectSetupError(StorypressError):
    """A project input is missing or unusable; the message says how to fix it."""


class MetadataError(ProjectSetupError):
    pass


class ManuscriptError(ProjectSetupError):
    pass


class CoverImageError(ProjectSetupError):
    pass


class ConfigError(ProjectSetupError):
    pass


class PageCountError(StorypressError, ValueError):
    """Page count outside the range a paperback can be printed at."""

    def __init__(self, page_count: int, minimum: int, maximum: int) -> None:
        self.page_count = page_count
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Page count {page_count} is outside the printable range "
            f"{minimum}-{maximum}. "
            + (
                "Add material or publish without a paperback cover."
                if page_count < minimum
                else "Split the book into volumes."
            )
        )
