"""Unit tests for the reference collaborators and account storage."""
from __future__ import annotations

import logging

import pytest

from lendcore.adapters import (
    InMemoryToken,
    LoggingEventSink,
    ManualClock,
    RecordingEventSink,
    SystemClock,
    publish,
)
from lendcore.auth import require_authorization
from lendcore.errors import InsufficientBalance, InvalidInput, Unauthorized
from lendcore.models import Account, LedgerEvent
from lendcore.pool import AccountBook

_EVENT = LedgerEvent(name="deposit", account="alice", amount=10, timestamp=1)


class TestClocks:
    def test_manual_clock_advance(self) -> None:
        clock = ManualClock(100)
        assert clock.advance(50) == 150
        assert clock.now() == 150

    def test_manual_clock_cannot_go_backwards(self) -> None:
        clock = ManualClock(100)
        with pytest.raises(ValueError):
            clock.set(99)

    def test_system_clock_is_int(self) -> None:
        assert isinstance(SystemClock().now(), int)


class TestInMemoryToken:
    def test_transfer_in_and_out(self) -> None:
        token = InMemoryToken("USDC", {"alice": 100})
        token.transfer_in("alice", 60)
        assert token.balance_of("alice") == 40
        assert token.vault_balance == 60
        token.transfer_out("bob", 25)
        assert token.balance_of("bob") == 25
        assert token.vault_balance == 35

    def test_short_wallet(self) -> None:
        token = InMemoryToken("USDC", {"alice": 10})
        with pytest.raises(InsufficientBalance):
            token.transfer_in("alice", 11)
        assert token.balance_of("alice") == 10
        assert token.vault_balance == 0

    def test_short_vault(self) -> None:
        token = InMemoryToken("USDC")
        with pytest.raises(InsufficientBalance):
            token.transfer_out("alice", 1)

    def test_non_positive_amount(self) -> None:
        token = InMemoryToken("USDC", {"alice": 10})
        with pytest.raises(InvalidInput):
            token.transfer_in("alice", 0)

    def test_mint(self) -> None:
        token = InMemoryToken("XLM")
        token.mint("dave", 7)
        assert token.balance_of("dave") == 7


class TestEventSinks:
    def test_recording_sink(self) -> None:
        sink = RecordingEventSink()
        publish(sink, _EVENT)
        assert sink.events == [_EVENT]
        assert sink.names() == ["deposit"]

    def test_logging_sink(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="lendcore.adapters.events"):
            LoggingEventSink().emit(_EVENT)
        assert "deposit" in caplog.text

    def test_publish_without_sink(self) -> None:
        publish(None, _EVENT)

    def test_failing_sink_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        class Broken:
            def emit(self, event: LedgerEvent) -> None:
                raise RuntimeError("sink down")

        with caplog.at_level(logging.ERROR):
            publish(Broken(), _EVENT)
        assert "sink down" in caplog.text


class TestAuthorization:
    def test_matching_caller(self) -> None:
        require_authorization("alice", "alice")

    @pytest.mark.parametrize("caller", ["bob", ""])
    def test_rejected(self, caller: str) -> None:
        with pytest.raises(Unauthorized):
            require_authorization(caller, "alice")


class TestAccountBook:
    def test_unknown_account_reads_zero(self) -> None:
        book = AccountBook()
        assert book.get("nobody") == Account()
        assert "nobody" not in book

    def test_empty_record_pruned(self) -> None:
        book = AccountBook()
        book.put("alice", Account(collateral_balance=5))
        assert len(book) == 1
        book.put("alice", Account())
        assert len(book) == 0
        assert list(book) == []

    def test_items(self) -> None:
        book = AccountBook()
        record = Account(deposit_shares=3)
        book.put("alice", record)
        assert book.items() == [("alice", record)]
