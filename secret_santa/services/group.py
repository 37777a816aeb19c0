from __future__ import annotations

import copy
import random
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from secret_santa.services.errors import DuplicateKeyError, NotFoundError
from secret_santa.services.participant import Participant
from secret_santa.services.state import validate_state

State = List[Dict[str, Any]]


@dataclass(frozen=True)
class Pairing:
    name: str
    recipient: Optional[str]

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"name": self.name, "recipient": self.recipient}


class SecretSanta:
    """Weighted Secret Santa draws over a group that persists between runs.

    ``state`` is the externally owned list of participant records. It is
    validated and copied on the way in; :meth:`serialize` hands back a fresh
    copy with every current participant's statistics merged in.
    """

    def __init__(
        self,
        state: Optional[State] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        strict: bool = True,
    ) -> None:
        state = [] if state is None else state
        validate_state(state)
        self.rng = rng or random.Random(seed)
        self.strict = strict
        self._state: State = copy.deepcopy(state)
        self._names: List[str] = []
        self._participants: Dict[str, Participant] = {}

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    @property
    def names(self) -> List[str]:
        return list(self._names)

    def has(self, name: str) -> bool:
        return name in self._participants

    def participant(self, name: str) -> Participant:
        if name not in self._participants:
            raise NotFoundError(f"Participant {name!r} does not exist.")
        return self._participants[name]

    def add_participant(self, name: str) -> "SecretSanta":
        if self.has(name):
            if self.strict:
                raise DuplicateKeyError(f"Cannot add participant. Name {name!r} already exists.")
            logger.warning("Participant {name} already registered, ignoring", name=name)
            return self

        record = self._find_record(name)
        participant = Participant.from_record(name, record, rng=self.rng, strict=self.strict)
        for existing in self._names:
            self._participants[existing].add_candidate(name)
            participant.add_candidate(existing)

        self._names.append(name)
        self._participants[name] = participant
        logger.debug(
            "Added participant {name} ({origin} stats)",
            name=name,
            origin="recovered" if record else "fresh",
        )
        return self

    def add_participants(self, names: Iterable[str]) -> "SecretSanta":
        for name in names:
            self.add_participant(name)
        return self

    def remove_participant(self, name: str) -> "SecretSanta":
        if not self.has(name):
            if self.strict:
                raise NotFoundError(f"Cannot remove participant. Name {name!r} does not exist.")
            logger.warning("Participant {name} is not registered, ignoring", name=name)
            return self

        del self._participants[name]
        self._names.remove(name)
        for remaining in self._names:
            self._participants[remaining].remove_candidate(name)
        logger.debug("Removed participant {name}", name=name)
        return self

    def clear(self) -> "SecretSanta":
        self._participants.clear()
        self._names = []
        return self

    def set_state(self, state: State) -> "SecretSanta":
        validate_state(state)
        names = self._names
        self.clear()
        self._state = copy.deepcopy(state)
        for name in names:
            self.add_participant(name)
        return self

    def draw(self) -> List[Pairing]:
        self._reload_hats()

        queue = list(self._names)
        self.rng.shuffle(queue)
        total = len(queue)
        logger.info("Drawing recipients for {count} participants", count=total)

        pairings: List[Pairing] = []
        chosen = set()
        for i, name in enumerate(queue):
            participant = self._participants[name]
            last = queue[-1]
            if i == total - 2 and last not in chosen:
                # the last participant must still have someone to draw
                recipient = last
            else:
                recipient = participant.hat.draw()

            if recipient is None:
                pairings.append(Pairing(name, None))
                continue

            for pending in queue[i + 1:]:
                if pending != recipient:
                    self._participants[pending].remove_candidate(recipient)

            chosen.add(recipient)
            pairings.append(Pairing(name, recipient))
            participant.choose(recipient)

        self._merge_state(self._participants[name].to_dict() for name in queue)
        self._reload_hats()
        logger.info("Draw finished with {count} pairings", count=len(pairings))
        return pairings

    def serialize(self) -> State:
        state = copy.deepcopy(self._state)
        return self._merged(state, (self._participants[name].to_dict() for name in self._names))

    def _reload_hats(self) -> None:
        # draws deplete hats, every draw starts from the full membership
        for name, participant in self._participants.items():
            participant.reload(other for other in self._names if other != name)

    def _find_record(self, name: str) -> Optional[Dict[str, Any]]:
        for record in self._state:
            if record.get("name") == name:
                return record
        return None

    def _merge_state(self, records: Iterable[Dict[str, Any]]) -> None:
        self._state = self._merged(self._state, records)

    @staticmethod
    def _merged(state: State, records: Iterable[Dict[str, Any]]) -> State:
        merged = {record["name"]: record for record in state}
        for record in records:
            existing = merged.get(record["name"], {})
            merged[record["name"]] = {**existing, **record}
        return list(merged.values())
