"""Exception types raised while documenting or generating tests."""


class AutodocError(Exception):
    """Base class for all tsautodoc errors."""


class ConfigLoadFailure(AutodocError):
    """The configuration file is missing or cannot be parsed."""


class MissingCredential(AutodocError):
    """The API key the selected model needs is not set in the environment."""

    def __init__(self, variable: str):
        self.variable = variable
        super().__init__(f"The {variable} environment variable is not set.")


class RequestFailure(AutodocError):
    """Transport, HTTP or decoding error while talking to the completion endpoint."""


class MalformedResponse(AutodocError):
    """The completion endpoint answered without a usable message."""


class ExtractionFailure(AutodocError):
    """The generated text holds no /** ... */ block."""
