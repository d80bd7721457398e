"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~errors_ai.exceptions.ErrorsAIError` subclass.
Shell scripts and CI jobs can inspect the exit code to tell a rejected
login from a network failure without parsing stderr.

Example::

    $ errors-ai login --no-browser --timeout-ms 1000
    $ echo $?
    124   # EXIT_TIMEOUT -- nobody approved the verification code in time
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or configuration."""

EXIT_AUTH_FAILURE = 3
"""Authentication failed or the stored API key was rejected."""

EXIT_SERVER_ERROR = 5
"""The Errors.AI API returned an HTTP 5xx error or an unexpected 4xx."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_TIMEOUT = 124
"""The browser login was not approved before the deadline."""
