# dbexplorer/errors.py
"""
Error kinds raised by the router and handlers.

Each kind carries the HTTP status it maps to; the app turns any
ExplorerError into a JSON body of the form {"error": "<message>"}.
"""


class ExplorerError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_body(self):
        return {"error": self.message}


class BadRequest(ExplorerError):
    status_code = 400


class InvalidRequest(BadRequest):
    """Method is known but not valid for the given path shape."""


class NotFound(ExplorerError):
    status_code = 404


class MethodNotAllowed(ExplorerError):
    status_code = 405


class InternalError(ExplorerError):
    status_code = 500
