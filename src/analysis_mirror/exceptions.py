"""analysis-mirror exception hierarchy.

All public exceptions inherit from AnalysisMirrorError, giving callers a single
base class to catch when they want to handle any mirror-specific failure
without swallowing unrelated errors.
"""


class AnalysisMirrorError(Exception):
    """Base exception for all analysis-mirror errors."""


class ConfigurationError(AnalysisMirrorError):
    """Raised when the server configuration is incomplete.

    Covers a missing user, API key / password, or server address. No
    network call is attempted once this is raised.
    """


class RemoteError(AnalysisMirrorError):
    """Raised when the remote analysis service cannot be reached.

    Covers timeouts, transport failures, HTTP error statuses and
    responses that are not valid JSON.
    """


class SelectionError(AnalysisMirrorError):
    """Raised when an action needs a project, snapshot or analysis that is not selected."""


class InvalidOptionValue(AnalysisMirrorError):
    """Raised when an edited form value does not fit its option field."""


class PostError(AnalysisMirrorError):
    """Raised when posting a code snapshot through the bundled CLI fails.

    Covers a missing bundle, a missing launcher inside the bundle, and a
    non-zero exit status of the CLI process.
    """
