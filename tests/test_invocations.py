"""Tests for the bounded invocation log."""

import pytest

from src.core.commands import InvocationLog, InvocationRecord


def record(i: int) -> InvocationRecord:
    return InvocationRecord(user_id=str(i), username=f"user{i}", command_name="ping")


class TestInvocationLog:
    def test_append_and_recent(self) -> None:
        log = InvocationLog()
        for i in range(5):
            log.append(record(i))

        assert [r.user_id for r in log.recent(3)] == ["2", "3", "4"]
        assert len(log.recent(100)) == 5
        assert log.recent(0) == []

    def test_capacity_not_exceeded_below_threshold(self) -> None:
        log = InvocationLog()
        for i in range(1000):
            log.append(record(i))

        assert len(log) == 1000

    def test_overflow_trims_to_most_recent_500(self) -> None:
        log = InvocationLog()
        for i in range(1001):
            log.append(record(i))

        assert len(log) == 500
        assert [r.user_id for r in log.recent(500)] == [str(i) for i in range(501, 1001)]

    def test_retain_must_fit_capacity(self) -> None:
        with pytest.raises(ValueError):
            InvocationLog(capacity=10, retain=20)

    def test_record_serialization(self) -> None:
        rec = InvocationRecord(
            user_id="1",
            username="a",
            command_name="ping",
            options={"target": "x"},
            guild_id="g",
            channel_id="c",
            timestamp="2024-01-01T00:00:00Z",
        )

        assert rec.to_dict() == {
            "timestamp": "2024-01-01T00:00:00Z",
            "userId": "1",
            "username": "a",
            "commandName": "ping",
            "options": {"target": "x"},
            "guildId": "g",
            "channelId": "c",
        }
