from __future__ import annotations

from mqtt_sensors.core.state_machine import ConnectionState, StateMachine


def test_shutdown_is_terminal() -> None:
    machine = StateMachine()

    assert machine.transition(ConnectionState.CONNECTING)
    assert machine.transition(ConnectionState.SHUTDOWN)
    assert not machine.transition(ConnectionState.CONNECTED)
    assert machine.state is ConnectionState.SHUTDOWN


def test_reconnect_cycle() -> None:
    machine = StateMachine(ConnectionState.CONNECTED)

    assert machine.transition(ConnectionState.RECONNECTING)
    assert not machine.can(ConnectionState.CONNECTING)
    assert machine.transition(ConnectionState.CONNECTED)
