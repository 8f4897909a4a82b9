from typing import Any, Optional


class FlavorConvertError(Exception):
    """Base class for all flavor conversion errors"""

    _msg_fmt = "An unknown error occurred while converting the flavor part."

    def __init__(self, message: Optional[str] = None, **kwargs: Any):
        if not message:
            message = self._msg_fmt % kwargs

        super().__init__(message)


class UsageError(FlavorConvertError):
    _msg_fmt = "Invalid usage."


class InvalidFileExtension(UsageError):
    _msg_fmt = "File '%(path)s' is not json"


class FileNotFound(UsageError):
    _msg_fmt = "File %(path)s does not exist"


class TemplateIOError(FlavorConvertError):
    _msg_fmt = "Error in reading flavor template files from %(path)s"


class FlavorPartIOError(FlavorConvertError):
    _msg_fmt = "Error in reading the old flavor part file %(path)s"


class OutputIOError(FlavorConvertError):
    _msg_fmt = "Error in writing the new flavor part file %(path)s"


class FlavorPartFormatError(FlavorConvertError):
    _msg_fmt = "Error in parsing the old flavor part json"


class TemplateFormatError(FlavorConvertError):
    _msg_fmt = "Error in unmarshaling the flavor template"
