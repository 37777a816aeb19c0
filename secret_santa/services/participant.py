from __future__ import annotations

import copy
import random
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from secret_santa.services.hat import WEIGHT_CEILING, Hat

DEFAULT_MEAN_WEIGHT = 1

_RECIPIENT_KEYS = ("name", "weight", "frequency")
_STATS_KEYS = ("meanRecipientWeight", "previousRecipient", "recipientRepeatFrequency", "recipients")


def _round_half_up(total: int, count: int) -> int:
    return (2 * total + count) // (2 * count)


@dataclass
class RecipientRecord:
    name: str
    weight: int
    frequency: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecipientRecord":
        extra = {key: copy.deepcopy(value) for key, value in data.items() if key not in _RECIPIENT_KEYS}
        return cls(
            name=data["name"],
            weight=int(data["weight"]),
            frequency=int(data.get("frequency", 0)),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = copy.deepcopy(self.extra)
        data.update(name=self.name, weight=self.weight, frequency=self.frequency)
        return data


@dataclass
class ParticipantStats:
    mean_recipient_weight: int = DEFAULT_MEAN_WEIGHT
    previous_recipient: str = ""
    recipient_repeat_frequency: int = 0
    recipients: List[RecipientRecord] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ParticipantStats":
        data = data or {}
        extra = {key: copy.deepcopy(value) for key, value in data.items() if key not in _STATS_KEYS}
        return cls(
            mean_recipient_weight=int(data.get("meanRecipientWeight", DEFAULT_MEAN_WEIGHT)),
            previous_recipient=data.get("previousRecipient", ""),
            recipient_repeat_frequency=int(data.get("recipientRepeatFrequency", 0)),
            recipients=[RecipientRecord.from_dict(item) for item in data.get("recipients", [])],
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = copy.deepcopy(self.extra)
        data.update(
            meanRecipientWeight=self.mean_recipient_weight,
            previousRecipient=self.previous_recipient,
            recipientRepeatFrequency=self.recipient_repeat_frequency,
            recipients=[recipient.to_dict() for recipient in self.recipients],
        )
        return data

    def find(self, name: str) -> Optional[RecipientRecord]:
        for recipient in self.recipients:
            if recipient.name == name:
                return recipient
        return None


class Participant:
    """One group member: persisted statistics plus a live hat of candidate recipients.

    The hat is derived from ``stats.recipients`` and can be rebuilt at any time
    with :meth:`reload`. Statistics survive candidate removal so a participant
    who leaves and later rejoins keeps their history.
    """

    def __init__(
        self,
        name: str,
        stats: Optional[ParticipantStats] = None,
        rng: Optional[random.Random] = None,
        strict: bool = True,
    ) -> None:
        self.name = name
        self.stats = stats or ParticipantStats()
        self.rng = rng or random.Random()
        self.strict = strict
        self.hat = Hat(rng=self.rng, strict=strict)

    @classmethod
    def from_record(
        cls,
        name: str,
        record: Optional[Dict[str, Any]] = None,
        rng: Optional[random.Random] = None,
        strict: bool = True,
    ) -> "Participant":
        stats = ParticipantStats.from_dict((record or {}).get("stats"))
        return cls(name, stats=stats, rng=rng, strict=strict)

    def __repr__(self) -> str:
        return f"<Participant(name={self.name!r}, candidates={self.hat.ids()})>"

    @property
    def candidates(self) -> List[str]:
        return self.hat.ids()

    def add_candidate(self, name: str) -> "Participant":
        record = self.stats.find(name)
        if record is None:
            record = RecipientRecord(name=name, weight=self.stats.mean_recipient_weight)
            self.stats.recipients.append(record)

        # stored weights may be zero, the hat needs at least one unit
        self.hat.insert(name, max(record.weight, 1))
        self._recalculate_mean()
        logger.debug(
            "{participant} can now draw {candidate} (weight {weight})",
            participant=self.name,
            candidate=name,
            weight=record.weight,
        )
        return self

    def remove_candidate(self, name: str) -> "Participant":
        self.hat.remove(name)
        return self

    def reload(self, candidates: Iterable[str]) -> "Participant":
        """Rebuild the hat so it holds exactly ``candidates`` at their stored weights."""
        self.hat = Hat(rng=self.rng, strict=self.strict)
        added = False
        for name in candidates:
            record = self.stats.find(name)
            if record is None:
                record = RecipientRecord(name=name, weight=self.stats.mean_recipient_weight)
                self.stats.recipients.append(record)
                added = True
            self.hat.insert(name, max(record.weight, 1))
        if added:
            self._recalculate_mean()
        return self

    def choose(self, name: str) -> "Participant":
        stats = self.stats
        if stats.previous_recipient == name:
            stats.recipient_repeat_frequency += 1
        stats.previous_recipient = name

        for recipient in stats.recipients:
            if recipient.name == name:
                recipient.frequency += 1
            else:
                recipient.weight += stats.mean_recipient_weight

        self._normalize_weights()
        self._recalculate_mean()
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "stats": self.stats.to_dict()}

    def _normalize_weights(self) -> None:
        while any(recipient.weight > WEIGHT_CEILING for recipient in self.stats.recipients):
            for recipient in self.stats.recipients:
                recipient.weight = -(-recipient.weight // 10)

    def _recalculate_mean(self) -> None:
        recipients = self.stats.recipients
        if not recipients:
            return
        total = sum(recipient.weight for recipient in recipients)
        self.stats.mean_recipient_weight = _round_half_up(total, len(recipients))
