##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
Module of all adapter-specific exception types.
"""

# Pylint complains that these exceptions are no different from Exception
# but we don't care, we just need new names for exceptions here
# pylint: disable=W0235

__all__ = (
    "AdapterError",
    "ConflictError",
    "NotConnectedError",
    "UnknownRecordTypeError",
)


class AdapterError(Exception):
    """
    Base class for every error raised by the adapter itself. Errors reported
    by the embedded store are never wrapped in this class, with the single
    exception of uniqueness violations (see `ConflictError`).
    """


class ConflictError(AdapterError):
    """
    Exception to signal that a record could not be created because its
    identifier is already taken.
    """

    def __init__(self, message: str = "Duplicate key."):
        super().__init__(message)


class NotConnectedError(AdapterError):
    """
    Exception to signal that an operation was attempted on an adapter
    that is not connected, or whose connect attempt failed.
    """


class UnknownRecordTypeError(AdapterError, KeyError):
    """
    Exception to signal that an operation named a record type that is
    not part of the adapter's schema.
    """

    def __str__(self) -> str:
        # KeyError quotes its argument, which garbles the message
        return str(self.args[0]) if self.args else ""
