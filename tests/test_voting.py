# tests/test_voting.py
import pytest

from uld_recovery.config import AppConfig
from uld_recovery.pipeline.grammar import CodeGrammar, Vocabulary
from uld_recovery.pipeline.models import Observation
from uld_recovery.pipeline.voting import VotingAggregator

_GRAMMAR = CodeGrammar(Vocabulary.of(AppConfig().prefixes, AppConfig().suffixes))
AKE = _GRAMMAR.parse("AKE12345CI")
PMC = _GRAMMAR.parse("PMC67890BR")
RKN = _GRAMMAR.parse("RKN00001NH")


def obs(code, conf, t):
    return Observation(code=code, confidence=conf, observed_at_ms=t)


def test_empty_window_has_no_estimate():
    assert VotingAggregator(5).current_estimate() is None


def test_confidence_weighted_convergence():
    v = VotingAggregator(7)
    t = 0
    for _ in range(5):
        v.record(obs(AKE, 90, t)); t += 400
    for _ in range(2):
        v.record(obs(PMC, 95, t)); t += 400
    assert v.current_estimate() == "AKE12345CI"
    assert v.tally() == {AKE: 450.0, PMC: 190.0}


def test_one_strong_read_outweighs_weak_noise():
    v = VotingAggregator(5)
    v.record(obs(PMC, 10, 0))
    v.record(obs(PMC, 10, 1))
    v.record(obs(AKE, 95, 2))
    assert v.current_estimate() == AKE


def test_tie_goes_to_most_recent():
    v = VotingAggregator(5)
    v.record(obs(AKE, 50, 100))
    v.record(obs(PMC, 50, 200))
    assert v.current_estimate() == PMC


def test_tie_uses_timestamp_not_insertion_order():
    v = VotingAggregator(5)
    v.record(obs(AKE, 50, 500))
    v.record(obs(PMC, 50, 200))  # inserted later but observed earlier
    assert v.current_estimate() == AKE


def test_window_eviction():
    v = VotingAggregator(3)
    first = obs(RKN, 99, 0)
    v.record(first)
    for t in range(1, 4):
        v.record(obs(AKE, 10, t))
    assert len(v) == 3
    assert first not in v.observations
    assert v.current_estimate() == AKE


def test_estimate_follows_new_code():
    v = VotingAggregator(5)
    for t in range(5):
        v.record(obs(AKE, 80, t))
    for t in range(5, 10):
        v.record(obs(PMC, 60, t))
    assert v.current_estimate() == PMC


def test_clear():
    v = VotingAggregator(5)
    v.record(obs(AKE, 80, 0))
    v.clear()
    assert len(v) == 0
    assert v.current_estimate() is None


def test_bad_capacity():
    with pytest.raises(ValueError):
        VotingAggregator(0)


@pytest.mark.parametrize("conf", [-0.1, 100.1])
def test_observation_confidence_range(conf):
    with pytest.raises(ValueError):
        Observation(code=AKE, confidence=conf, observed_at_ms=0)
