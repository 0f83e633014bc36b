from enum import Enum, auto
from typing import Dict, List

class ConnectionState(Enum):
    DISCONNECTED  = auto()
    CONNECTING    = auto()
    CONNECTED     = auto()
    RECONNECTING  = auto()
    ERROR         = auto()
    SHUTDOWN      = auto()

class StateMachine:
    def __init__(self, initial: ConnectionState = ConnectionState.DISCONNECTED):
        self._state = initial
        self._trans: Dict[ConnectionState, List[ConnectionState]] = {
            ConnectionState.DISCONNECTED: [ConnectionState.CONNECTING, ConnectionState.CONNECTED, ConnectionState.ERROR,
                                           ConnectionState.RECONNECTING, ConnectionState.SHUTDOWN],
            ConnectionState.CONNECTING:   [ConnectionState.CONNECTED, ConnectionState.RECONNECTING,
                                           ConnectionState.ERROR, ConnectionState.SHUTDOWN],
            ConnectionState.CONNECTED:    [ConnectionState.DISCONNECTED, ConnectionState.RECONNECTING,
                                           ConnectionState.ERROR, ConnectionState.SHUTDOWN],
            ConnectionState.RECONNECTING: [ConnectionState.CONNECTED, ConnectionState.ERROR,
                                           ConnectionState.DISCONNECTED, ConnectionState.SHUTDOWN],
            ConnectionState.ERROR:        [ConnectionState.CONNECTING, ConnectionState.CONNECTED,
                                           ConnectionState.RECONNECTING, ConnectionState.SHUTDOWN],
            ConnectionState.SHUTDOWN:     [],
        }

    @property
    def state(self) -> ConnectionState: return self._state

    def can(self, nxt: ConnectionState) -> bool: return nxt in self._trans[self._state]

    def transition(self, nxt: ConnectionState) -> bool:
        if self.can(nxt):
            self._state = nxt
            return True
        return False
