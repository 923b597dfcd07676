"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~oidc_session.exceptions.AuthSessionError` subclass.
The ``oidc-session`` CLI exits with these codes so shell wrappers can tell
failure classes apart without parsing stderr.

Example::

    $ oidc-session settings --file missing.json
    $ echo $?
    1   # EXIT_GENERIC_FAILURE -- the settings file could not be read
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments, or an operation was
called in an environment that does not support it."""

EXIT_AUTH_FAILURE = 3
"""Sign-in or sign-out could not be completed."""
