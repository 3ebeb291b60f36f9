"""
Tests for ballot tallying and eligibility.
"""

import pytest

from ballot_stats.core.errors import TransportError, UnrecognizedEventError
from ballot_stats.core.events import BallotCreated, RawEvent
from ballot_stats.replay.classifier import classify
from ballot_stats.replay.observer import RecordingObserver
from ballot_stats.replay.tally import BallotTally, TallyConfig
from ballot_stats.replay.voters import VoterSetTracker
from ballot_stats.stats.aggregator import StatsAggregator

from .builders import (
    A,
    B,
    C,
    ROGUE,
    VOTING_V1,
    VOTING_V2,
    ballot_created,
    block_ts,
    make_chain,
    make_registry,
    vote,
)


def _setup(logs, voters=(), config=TallyConfig()):
    chain = make_chain(logs)
    registry = make_registry()
    obs = RecordingObserver()
    tracker = VoterSetTracker(chain, registry, obs, initial=voters)
    stats = StatsAggregator()
    tally = BallotTally(tracker, stats, chain, registry, config, obs)
    return chain, registry, tracker, stats, tally, obs


def _ballot(raw, registry):
    ev = classify(raw, registry)
    assert isinstance(ev, BallotCreated)
    return ev


def test_voted_and_missed():
    logs = [ballot_created(10, 1), vote(11, 1, A)]
    _, registry, _, stats, tally, _ = _setup(logs, voters=[A, B])

    outcome = tally.on_ballot(_ballot(logs[0], registry))

    assert outcome.voted == frozenset({A})
    assert outcome.eligible == (A, B)
    assert (stats.get(A).ballots_eligible, stats.get(A).ballots_voted) == (1, 1)
    assert (stats.get(B).ballots_eligible, stats.get(B).ballots_voted) == (1, 0)


def test_repeated_vote_counts_once():
    logs = [ballot_created(10, 1), vote(11, 1, A, log_index=0), vote(12, 1, A, decision=2, log_index=0)]
    _, registry, _, stats, tally, _ = _setup(logs, voters=[A])

    tally.on_ballot(_ballot(logs[0], registry))

    assert stats.get(A).ballots_voted == 1
    assert stats.get(A).ballots_eligible == 1


def test_unexpected_voter_is_tracked_and_counted():
    logs = [ballot_created(20, 2), vote(21, 2, C)]
    _, registry, tracker, stats, tally, obs = _setup(logs, voters=[B])

    outcome = tally.on_ballot(_ballot(logs[0], registry))

    assert C in tracker
    assert outcome.unexpected == (C,)
    assert (stats.get(C).ballots_eligible, stats.get(C).ballots_voted) == (1, 1)
    assert (stats.get(B).ballots_eligible, stats.get(B).ballots_voted) == (1, 0)
    assert obs.of_kind("unexpected_voter")[0].detail["voter"] == str(C)


def test_constant_voter_eligible_for_every_ballot():
    n = 7
    logs = []
    for i in range(n):
        logs.append(ballot_created(10 + i * 10, i))
        if i % 2 == 0:
            logs.append(vote(11 + i * 10, i, B))
    _, registry, _, stats, tally, _ = _setup(logs, voters=[A, B])

    for raw in logs:
        if raw.address == VOTING_V2 and len(raw.topics) == 4:
            tally.on_ballot(_ballot(raw, registry))

    assert stats.get(A).ballots_eligible == n
    assert stats.get(A).ballots_voted == 0
    assert stats.get(B).ballots_eligible == n
    assert stats.get(B).ballots_voted == 4


def test_votes_from_other_versions_do_not_leak():
    """Same ballot id on v1 and v2 contracts: each ballot sees only its own votes."""
    logs = [
        ballot_created(10, 5, contract=VOTING_V2),
        vote(11, 5, A, contract=VOTING_V2),
        ballot_created(12, 5, contract=VOTING_V1),
        vote(13, 5, B, contract=VOTING_V1),
        vote(14, 5, C, contract=ROGUE),
    ]
    _, registry, _, stats, tally, _ = _setup(logs, voters=[A, B])

    v2 = tally.on_ballot(_ballot(logs[0], registry))
    v1 = tally.on_ballot(_ballot(logs[2], registry))

    assert v2.voted == frozenset({A})
    assert v1.voted == frozenset({B})
    assert C not in stats


def test_min_block_skips_without_mutation():
    logs = [ballot_created(10, 1), vote(11, 1, A)]
    _, registry, tracker, stats, tally, obs = _setup(logs, voters=[A, B], config=TallyConfig(min_block=11))

    assert tally.on_ballot(_ballot(logs[0], registry)) is None
    assert len(stats) == 0
    assert tally.skipped == 1
    assert obs.kinds() == ["ballot_skipped"]


def test_min_time_skips_old_ballots():
    logs = [ballot_created(10, 1), vote(11, 1, A), ballot_created(30, 2), vote(31, 2, A)]
    config = TallyConfig(min_time=block_ts(20))
    _, registry, _, stats, tally, _ = _setup(logs, voters=[A], config=config)

    assert tally.on_ballot(_ballot(logs[0], registry)) is None
    assert tally.on_ballot(_ballot(logs[2], registry)) is not None
    assert stats.get(A).ballots_eligible == 1


def test_vote_query_failure_aborts():
    logs = [ballot_created(10, 1)]
    chain, registry, _, stats, tally, _ = _setup(logs, voters=[A])
    ballot = _ballot(logs[0], registry)
    chain.fail_queries = OSError("connection reset")

    with pytest.raises(TransportError):
        tally.on_ballot(ballot)
    assert len(stats) == 0


def test_malformed_vote_is_fatal():
    logs = [ballot_created(10, 1), vote(11, 1, A)]
    good = logs[1]
    bad = RawEvent(block_number=11, address=VOTING_V2, topics=good.topics, data=good.data[:32])
    _, registry, _, _, tally, _ = _setup([logs[0], bad], voters=[A])

    with pytest.raises(UnrecognizedEventError):
        tally.on_ballot(_ballot(logs[0], registry))
