from __future__ import annotations


class StudioError(Exception):
    pass


class ClassificationAmbiguous(StudioError):
    """Content type missing or unparsable; the item is kept as ``other``."""


class DecodeFailure(StudioError):
    """An image could not be turned into inline preview data."""


class TransientResourceFailure(StudioError):
    """A revocable reference to a video's bytes could not be minted."""


class EmptyInputError(StudioError):
    def __init__(self, message: str = "Please select files first!"):
        super().__init__(message)


class ExportFailure(StudioError):
    def __init__(self, message: str = "Failed to copy script automatically. Please copy it manually."):
        super().__init__(message)


class InvalidPhase(StudioError):
    pass


class MissingSurfaceError(StudioError):
    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__("Host page is missing required elements: " + ", ".join(self.missing))
