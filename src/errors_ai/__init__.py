"""errors_ai -- command-line client for the Errors.AI code analysis service.

The package is mostly concerned with getting a credential onto the user's
machine without asking them to paste it into a terminal. ``errors-ai login``
shows a short verification code, sends the user to the web dashboard to
approve it, and waits on a local HTTP listener for the dashboard to redirect
back with the issued API key.

Typical workflow::

    errors-ai login      # browser-based login
    errors-ai whoami     # show the authenticated account
    errors-ai logout     # forget the stored API key

Modules:
    app: Typer application and console-script entry point.
    auth: Browser login flow, callback listener, and credential store.
    client: httpx-based client for the Errors.AI REST API.
    config: XDG-aware configuration and login settings resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    models: Pydantic models shared across the package.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "1.0.0"
