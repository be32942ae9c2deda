# parsers/errors.py


class StatusFormatError(Exception):
    """A status file could not be read for this cycle."""

    def __init__(self, source_name: str, message: str):
        super().__init__(f"{source_name}: {message}")
        self.source_name = source_name


class EmptyOrUnreadableSource(StatusFormatError):
    """The stream yielded no first line."""


class UnrecognizedFormat(StatusFormatError):
    """Title line or required header does not match any known layout."""


class FieldCountMismatch(StatusFormatError):
    """A CLIENT_LIST row does not have the column count its header declared."""
