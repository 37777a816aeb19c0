from __future__ import annotations


class SantaError(RuntimeError):
    pass


class DuplicateKeyError(SantaError):
    pass


class NotFoundError(SantaError):
    pass


class EmptyHatError(SantaError):
    pass


class StateValidationError(SantaError, ValueError):
    pass
