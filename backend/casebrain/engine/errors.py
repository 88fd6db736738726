"""Exceptions raised by the workflow engine."""


class CaseBrainError(Exception):
    """Base exception for all custom exceptions"""
    pass


class InputRejected(CaseBrainError):
    """Raised when user input is empty or nothing was selected"""
    pass


class UpstreamTransportError(CaseBrainError):
    """Raised when a call to the model service fails"""
    pass


class MalformedResponse(CaseBrainError):
    """Raised when the model returns text that is not the expected JSON shape"""
    pass


class DeviceAccessError(CaseBrainError):
    """Raised when the microphone cannot be opened"""
    pass
