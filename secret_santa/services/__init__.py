from secret_santa.services.errors import (
    DuplicateKeyError,
    EmptyHatError,
    NotFoundError,
    SantaError,
    StateValidationError,
)
from secret_santa.services.group import Pairing, SecretSanta
from secret_santa.services.hat import Hat
from secret_santa.services.participant import Participant, ParticipantStats, RecipientRecord
from secret_santa.services.state import load_state, save_state, validate_state

__all__ = [
    "DuplicateKeyError",
    "EmptyHatError",
    "NotFoundError",
    "SantaError",
    "StateValidationError",
    "Pairing",
    "SecretSanta",
    "Hat",
    "Participant",
    "ParticipantStats",
    "RecipientRecord",
    "load_state",
    "save_state",
    "validate_state",
]
