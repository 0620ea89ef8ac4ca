"""Tests for the game reward consumer."""

import json

import pytest

from pawpal_market.consumers import game_consumer
from pawpal_market.models.points import PointsLedgerEntry, ProcessedEvent
from pawpal_market.services.points_service import PointsService
from tests.conftest import ALICE


def game_event(event_id="evt-1", **data):
    payload = {"user_id": ALICE.id, "points": 15, "game_type": "fetch", "session_id": 7}
    payload.update(data)
    return {"event_type": "GamePointsEarned", "event_id": event_id, "data": payload}


class FakeMethod:
    delivery_tag = 42


class FakeChannel:
    def __init__(self):
        self.acked = []
        self.nacked = []

    def basic_ack(self, delivery_tag):
        self.acked.append(delivery_tag)

    def basic_nack(self, delivery_tag, requeue):
        self.nacked.append((delivery_tag, requeue))


class TestProcessGamePointsEvent:
    """Tests for PointsService.process_game_points_event."""

    def test_awards_game_reward(self, db):
        service = PointsService(db)

        assert service.process_game_points_event(game_event()) is True

        entry = db.query(PointsLedgerEntry).one()
        assert (entry.user_id, entry.points, entry.type) == (ALICE.id, 15, "game_reward")
        assert entry.description == "Game reward: fetch"
        assert db.query(ProcessedEvent).filter(ProcessedEvent.event_id == "evt-1").count() == 1

    def test_redelivery_is_skipped(self, db):
        service = PointsService(db)

        assert service.process_game_points_event(game_event()) is True
        assert service.process_game_points_event(game_event()) is True

        assert service.balance(ALICE.id) == 15

    def test_missing_event_id(self, db):
        event = game_event()
        del event["event_id"]

        assert PointsService(db).process_game_points_event(event) is False
        assert db.query(PointsLedgerEntry).count() == 0

    @pytest.mark.parametrize("data", [{"points": 0}, {"points": -3}, {"user_id": None}, {"game_type": ""}])
    def test_invalid_payload(self, db, data):
        assert PointsService(db).process_game_points_event(game_event(**data)) is False
        assert db.query(PointsLedgerEntry).count() == 0
        assert db.query(ProcessedEvent).count() == 0


class TestCallback:
    """Tests for the RabbitMQ message callback."""

    @pytest.fixture(autouse=True)
    def use_test_sessions(self, monkeypatch, session_factory):
        monkeypatch.setattr(game_consumer, "SessionLocal", session_factory)

    def test_valid_message_is_acked(self, db):
        channel = FakeChannel()

        game_consumer.callback(channel, FakeMethod(), None, json.dumps(game_event()).encode())

        assert channel.acked == [42]
        assert channel.nacked == []
        assert PointsService(db).balance(ALICE.id) == 15

    def test_invalid_payload_is_rejected(self):
        channel = FakeChannel()

        game_consumer.callback(channel, FakeMethod(), None, json.dumps(game_event(points=0)).encode())

        assert channel.nacked == [(42, False)]

    def test_malformed_json_is_rejected(self):
        channel = FakeChannel()

        game_consumer.callback(channel, FakeMethod(), None, b"{not json")

        assert channel.acked == []
        assert channel.nacked == [(42, False)]

    def test_processing_failure_is_rejected(self, monkeypatch):
        def explode(self, event):
            raise RuntimeError("database is down")

        monkeypatch.setattr(PointsService, "process_game_points_event", explode)
        channel = FakeChannel()

        game_consumer.callback(channel, FakeMethod(), None, json.dumps(game_event()).encode())

        assert channel.nacked == [(42, False)]
