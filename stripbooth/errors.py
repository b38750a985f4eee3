class BoothError(Exception):
    """Base class for booth failures surfaced to the UI."""


class CameraUnavailableError(BoothError):
    """The camera could not be opened or produced no frames."""


class RecorderError(BoothError):
    """No usable video encoder, or a recorder failed mid-clip."""


class UploadError(BoothError):
    """An upload call failed or returned an unusable response."""


class SessionStateError(BoothError):
    """A command was issued in a phase that does not accept it."""
