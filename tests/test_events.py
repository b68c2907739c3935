"""
Tests for connection events and the heartbeat listener
"""

import logging
from unittest.mock import Mock

import pytest

from database.events import (
    DISCONNECTED, ERROR, RECONNECTED, ConnectionEvents, HeartbeatListener,
    attach_logging_observers,
)

PRIMARY = ("db-1.example.com", 27017)
SECONDARY = ("db-2.example.com", 27017)


def heartbeat(address, reply=None):
    return Mock(connection_id=address, reply=reply)


@pytest.fixture
def events():
    return ConnectionEvents()


@pytest.fixture
def recorder(events):
    """Observer mocks subscribed to every event"""
    observers = {name: Mock() for name in (ERROR, DISCONNECTED, RECONNECTED)}
    for name, observer in observers.items():
        events.on(name, observer)
    return observers


class TestConnectionEvents:
    """Test the event hub"""

    def test_emit_calls_observers_in_order(self, events):
        calls = []
        events.on(DISCONNECTED, lambda: calls.append("first"))
        events.on(DISCONNECTED, lambda: calls.append("second"))

        assert events.emit(DISCONNECTED) == 2
        assert calls == ["first", "second"]

    def test_emit_passes_arguments(self, events):
        observer = Mock()
        events.on(ERROR, observer)
        error = RuntimeError("boom")

        events.emit(ERROR, error)

        observer.assert_called_once_with(error)

    def test_off_removes_observer(self, events):
        observer = Mock()
        events.on(RECONNECTED, observer)
        events.off(RECONNECTED, observer)
        events.off(RECONNECTED, observer)

        assert events.emit(RECONNECTED) == 0
        observer.assert_not_called()

    def test_unknown_event_rejected(self, events):
        with pytest.raises(ValueError):
            events.on("connected", Mock())

    def test_failing_observer_does_not_stop_others(self, events, find_logs):
        """An observer exception is logged and the next observer still runs"""
        second = Mock()
        events.on(DISCONNECTED, Mock(side_effect=RuntimeError("observer bug")))
        events.on(DISCONNECTED, second)

        events.emit(DISCONNECTED)

        second.assert_called_once()
        assert len(find_logs("observer failed for 'disconnected'", logging.ERROR)) == 1


class TestHeartbeatListener:
    """Test heartbeat to event translation"""

    def test_first_success_emits_nothing(self, events, recorder):
        listener = HeartbeatListener(events)

        listener.succeeded(heartbeat(PRIMARY))

        assert listener.is_reachable
        for observer in recorder.values():
            observer.assert_not_called()

    def test_failure_of_reachable_server_disconnects(self, events, recorder):
        listener = HeartbeatListener(events)
        error = OSError("connection reset")
        listener.succeeded(heartbeat(PRIMARY))

        listener.failed(heartbeat(PRIMARY, error))

        recorder[ERROR].assert_called_once_with(error)
        recorder[DISCONNECTED].assert_called_once_with()
        assert not listener.is_reachable

    def test_repeated_failures_emit_once(self, events, recorder):
        """A server that stays down is reported on the transition only"""
        listener = HeartbeatListener(events)
        listener.succeeded(heartbeat(PRIMARY))

        for _ in range(3):
            listener.failed(heartbeat(PRIMARY, OSError("down")))

        assert recorder[ERROR].call_count == 1
        assert recorder[DISCONNECTED].call_count == 1

    def test_failure_before_first_success_is_silent(self, events, recorder):
        listener = HeartbeatListener(events)

        listener.failed(heartbeat(PRIMARY, OSError("refused")))

        recorder[ERROR].assert_not_called()
        recorder[DISCONNECTED].assert_not_called()

    def test_recovery_emits_reconnected_once(self, events, recorder):
        listener = HeartbeatListener(events)
        listener.succeeded(heartbeat(PRIMARY))
        listener.failed(heartbeat(PRIMARY, OSError("down")))

        listener.succeeded(heartbeat(PRIMARY))
        listener.succeeded(heartbeat(PRIMARY))

        recorder[RECONNECTED].assert_called_once_with()

    def test_losing_one_of_two_servers_is_not_a_disconnect(self, events, recorder):
        """The connection stays up while any server is reachable"""
        listener = HeartbeatListener(events)
        listener.succeeded(heartbeat(PRIMARY))
        listener.succeeded(heartbeat(SECONDARY))

        listener.failed(heartbeat(PRIMARY, OSError("down")))

        recorder[ERROR].assert_called_once()
        recorder[DISCONNECTED].assert_not_called()

        listener.failed(heartbeat(SECONDARY, OSError("down")))
        recorder[DISCONNECTED].assert_called_once()

        listener.succeeded(heartbeat(SECONDARY))
        listener.succeeded(heartbeat(PRIMARY))
        recorder[RECONNECTED].assert_called_once()


class TestLoggingObservers:
    """Test the default log lines"""

    def test_each_event_logs_one_line(self, events, find_logs):
        attach_logging_observers(events)

        events.emit(ERROR, RuntimeError("socket closed"))
        events.emit(DISCONNECTED)
        events.emit(RECONNECTED)

        assert len(find_logs("MongoDB connection error: socket closed", logging.ERROR)) == 1
        assert len(find_logs("MongoDB disconnected", logging.WARNING)) == 1
        assert len(find_logs("MongoDB reconnected", logging.INFO)) == 1
