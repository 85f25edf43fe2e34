from __future__ import annotations


class ArgusError(Exception):
    pass


class NotFoundError(ArgusError):
    pass


class PermissionDeniedError(ArgusError):
    pass


class CaptureError(ArgusError):
    pass


class SummarizationError(ArgusError):
    pass
