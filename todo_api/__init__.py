"""
Todo API Package Initialization

Token-authenticated task tracking backend. Tasks own a tree of threaded
comments; every task and comment operation requires a bearer token issued
by the auth endpoints.
"""

from todo_api.version import __version__

__author__ = "Todo API Team"
__license__ = "MIT"

__all__ = ["__version__"]
