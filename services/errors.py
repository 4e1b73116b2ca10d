# token_qr/services/errors.py


class ConversionError(Exception):
    """Base class for failures of a spreadsheet-to-archive run."""


class MissingInputError(ConversionError):
    def __init__(self, message: str = "No file uploaded"):
        super().__init__(message)


class DecodeError(ConversionError):
    """The uploaded file couldn't be read as a table."""


class SynthesisError(ConversionError):
    """
    A single token couldn't be turned into a QR artifact.
    Dropped from the archive, the rest of the batch continues.
    """

    def __init__(self, token: str, message: str):
        super().__init__(f"{token}: {message}")
        self.token = token
        self.reason = message


class PackagingError(ConversionError):
    """The archive couldn't be serialized."""
