import pytest

from secret_santa.services.errors import NotFoundError
from secret_santa.services.participant import Participant, ParticipantStats


def make_participant(recipients=None, **stats):
    record = {"stats": dict(stats)}
    if recipients is not None:
        record["stats"]["recipients"] = recipients
    return Participant.from_record("A", record)


def weights(participant):
    return {r.name: r.weight for r in participant.stats.recipients}


def test_fresh_participant_defaults():
    participant = Participant("A")
    assert participant.stats.mean_recipient_weight == 1
    assert participant.stats.previous_recipient == ""
    assert participant.stats.recipient_repeat_frequency == 0
    assert participant.stats.recipients == []
    assert participant.candidates == []


def test_add_candidate_defaults_to_mean_weight():
    participant = make_participant(
        recipients=[{"name": "B", "weight": 6, "frequency": 1}],
        meanRecipientWeight=6,
    )
    participant.add_candidate("C")

    record = participant.stats.find("C")
    assert record.weight == 6
    assert record.frequency == 0
    assert participant.hat.weight("C") == 6
    assert participant.stats.mean_recipient_weight == 6


def test_add_candidate_recovers_previous_record():
    participant = make_participant(recipients=[{"name": "B", "weight": 7, "frequency": 2}])
    participant.add_candidate("B")

    assert participant.hat.weight("B") == 7
    assert participant.stats.find("B").frequency == 2
    assert len(participant.stats.recipients) == 1
    assert participant.stats.mean_recipient_weight == 7


def test_add_candidate_with_zero_weight_enters_hat_with_one():
    participant = make_participant(recipients=[{"name": "B", "weight": 0, "frequency": 0}])
    participant.add_candidate("B")
    assert participant.hat.weight("B") == 1
    assert participant.stats.find("B").weight == 0


def test_mean_rounds_half_up():
    participant = make_participant(
        recipients=[
            {"name": "B", "weight": 2, "frequency": 0},
            {"name": "C", "weight": 3, "frequency": 0},
        ]
    )
    participant.add_candidate("B")
    assert participant.stats.mean_recipient_weight == 3


def test_remove_candidate_keeps_statistics():
    participant = Participant("A")
    participant.add_candidate("B").add_candidate("C")
    participant.remove_candidate("B")

    assert participant.candidates == ["C"]
    assert participant.stats.find("B") is not None


def test_remove_unknown_candidate_raises():
    with pytest.raises(NotFoundError):
        Participant("A").remove_candidate("B")


def test_choose_updates_weights_and_frequency():
    participant = Participant("A")
    for name in "BCD":
        participant.add_candidate(name)

    participant.choose("C")

    assert weights(participant) == {"B": 2, "C": 1, "D": 2}
    assert participant.stats.find("C").frequency == 1
    assert participant.stats.previous_recipient == "C"
    assert participant.stats.recipient_repeat_frequency == 0
    assert participant.stats.mean_recipient_weight == 2


def test_choose_tracks_repeats():
    participant = Participant("A")
    for name in "BCD":
        participant.add_candidate(name)

    participant.choose("C")
    participant.choose("C")
    assert participant.stats.recipient_repeat_frequency == 1
    assert weights(participant) == {"B": 4, "C": 1, "D": 4}
    assert participant.stats.mean_recipient_weight == 3

    participant.choose("B")
    assert participant.stats.recipient_repeat_frequency == 1
    assert participant.stats.previous_recipient == "B"


def test_choose_normalizes_large_weights():
    participant = make_participant(
        recipients=[
            {"name": "B", "weight": 9999, "frequency": 0},
            {"name": "C", "weight": 5000, "frequency": 0},
        ],
        meanRecipientWeight=7500,
    )
    participant.choose("C")

    assert weights(participant) == {"B": 1750, "C": 500}
    assert participant.stats.mean_recipient_weight == 1125


def test_reload_rebuilds_hat_from_statistics():
    participant = Participant("A")
    participant.add_candidate("B").add_candidate("C")
    participant.choose("B")
    participant.remove_candidate("B")
    participant.remove_candidate("C")

    participant.reload(["B", "C"])

    assert participant.candidates == ["B", "C"]
    assert participant.hat.weight("B") == 1
    assert participant.hat.weight("C") == 2


def test_reload_drops_candidates_not_listed():
    participant = Participant("A")
    participant.add_candidate("B").add_candidate("C")

    participant.reload(["C"])

    assert participant.candidates == ["C"]
    assert participant.stats.find("B") is not None


def test_reload_registers_unknown_candidates_at_mean_weight():
    participant = make_participant(
        recipients=[{"name": "B", "weight": 4, "frequency": 0}],
        meanRecipientWeight=4,
    )
    participant.reload(["B", "C"])

    assert participant.hat.weight("C") == 4
    assert participant.stats.find("C").frequency == 0


def test_to_dict_is_independent_copy():
    participant = make_participant(
        recipients=[{"name": "B", "weight": 3, "frequency": 1, "note": "likes tea"}],
        previousRecipient="B",
        wishlist=["socks"],
    )
    data = participant.to_dict()

    assert data["name"] == "A"
    assert data["stats"]["wishlist"] == ["socks"]
    assert data["stats"]["recipients"][0]["note"] == "likes tea"

    data["stats"]["recipients"][0]["weight"] = 999
    data["stats"]["wishlist"].append("mug")
    assert participant.stats.find("B").weight == 3
    assert participant.stats.extra["wishlist"] == ["socks"]


def test_stats_round_trip_preserves_keys():
    raw = {
        "meanRecipientWeight": 4,
        "previousRecipient": "C",
        "recipientRepeatFrequency": 2,
        "recipients": [{"name": "C", "weight": 4, "frequency": 3}],
    }
    assert ParticipantStats.from_dict(raw).to_dict() == raw
