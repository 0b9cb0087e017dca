import pytest

from screening.config import Settings
from screening.exceptions import RemoteScoringError, StorageError
from screening.models import AddressKey, ScreeningVerdict
from screening.scoring.risk_scorer import RemoteRiskScorer, ScorerSettings
from screening.screener import AddressScreener, build_address_screener

ADDR_A = AddressKey(chain="bitcoin", address="addrA")
ADDR_B = AddressKey(chain="ethereum", address="addrB")
ADDR_C = AddressKey(chain="ethereum", address="addrC")


@pytest.fixture()
def screener(store, clearance_cache):
    settings = ScorerSettings(
        url="https://screening.example/addresses",
        api_key="test-key",
        batch_size=5,
        risk_score_limit=10,
        always_whitelisted=frozenset({"0xtreasury"}),
    )
    return AddressScreener(RemoteRiskScorer(settings, clearance_cache), store)


def test_new_blacklisted_address_is_recorded_durably(screener, store, screening_api):
    screening_api.risk_levels["addrA"] = 15

    first = screener.is_blacklisted([ADDR_A])

    assert first == [ScreeningVerdict(address=ADDR_A, is_blacklisted=True)]
    assert store.lookup([ADDR_A])[0].is_blacklisted

    second = screener.is_blacklisted([ADDR_A])

    assert second == first
    assert len(screening_api.calls) == 1


def test_all_durable_hits_skip_scorer(screener, store, screening_api):
    store.record([ScreeningVerdict(address=ADDR_A, is_blacklisted=True)])

    verdicts = screener.is_blacklisted([ADDR_A])

    assert verdicts[0].is_blacklisted
    assert screening_api.calls == []


def test_partial_miss_scores_only_unknown_addresses(screener, store, screening_api):
    store.record([ScreeningVerdict(address=ADDR_B, is_blacklisted=True)])
    screening_api.risk_levels["addrC"] = 30

    verdicts = screener.is_blacklisted([ADDR_A, ADDR_B, ADDR_C])

    assert [verdict.address for verdict in verdicts] == [ADDR_A, ADDR_B, ADDR_C]
    assert [verdict.is_blacklisted for verdict in verdicts] == [False, True, True]
    assert sorted(screening_api.submitted) == ["addrA", "addrC"]
    assert store.lookup([ADDR_C])[0].is_blacklisted
    assert store.lookup([ADDR_A])[0].not_found


def test_clean_verdicts_are_never_stored_durably(screener, store, screening_api):
    screener.is_blacklisted([ADDR_A, ADDR_B])

    assert all(result.not_found for result in store.lookup([ADDR_A, ADDR_B]))


def test_durable_positive_wins_over_whitelist_and_cache(screener, store, clearance_cache, screening_api):
    treasury = AddressKey(chain="ethereum", address="0xtreasury")
    store.record(
        [
            ScreeningVerdict(address=treasury, is_blacklisted=True),
            ScreeningVerdict(address=ADDR_C, is_blacklisted=True),
        ]
    )
    clearance_cache.put(ADDR_C.id)

    verdicts = screener.is_blacklisted([treasury, ADDR_C])

    assert all(verdict.is_blacklisted for verdict in verdicts)
    assert screening_api.calls == []


def test_expired_clearance_rescored(screener, screening_api, clock):
    screener.is_blacklisted([ADDR_C])
    screener.is_blacklisted([ADDR_C])
    assert len(screening_api.calls) == 1

    clock.advance(61)
    screener.is_blacklisted([ADDR_C])
    assert len(screening_api.calls) == 2


def test_duplicate_inputs_each_get_a_verdict(screener, store, screening_api):
    store.record([ScreeningVerdict(address=ADDR_A, is_blacklisted=True)])

    verdicts = screener.is_blacklisted([ADDR_B, ADDR_A, ADDR_B])

    assert [verdict.address for verdict in verdicts] == [ADDR_B, ADDR_A, ADDR_B]
    assert screening_api.submitted == ["addrB"]


def test_empty_input(screener, screening_api):
    assert screener.is_blacklisted([]) == []


def test_scorer_failure_propagates_without_durable_write(screener, store, screening_api):
    screening_api.risk_levels["addrA"] = 99
    screening_api.status_code = 503

    with pytest.raises(RemoteScoringError):
        screener.is_blacklisted([ADDR_A])

    assert store.lookup([ADDR_A])[0].not_found


def test_storage_failure_propagates(screener, screening_api):
    class BrokenStore:
        def lookup(self, addresses):
            raise StorageError("database unavailable")

    screener.store = BrokenStore()

    with pytest.raises(StorageError):
        screener.is_blacklisted([ADDR_A])
    assert screening_api.calls == []


def test_build_address_screener_uses_settings(store):
    settings = Settings(
        database_url="sqlite://",
        screener_api_key="secret",
        risk_score_limit=7,
        whitelisted_addresses=frozenset({"0xtreasury"}),
        api_batch_size=3,
        clearance_ttl_seconds=30,
        clearance_max_entries=10,
    )

    screener = build_address_screener(settings, store=store)

    assert screener.store is store
    assert screener.scorer.settings.batch_size == 3
    assert screener.scorer.settings.risk_score_limit == 7
    assert screener.scorer.settings.always_whitelisted == frozenset({"0xtreasury"})
    assert screener.scorer.cache.ttl_seconds == 30
    assert screener.scorer.cache.max_entries == 10
