"""
Shared fixtures for the protocol tests.
"""

import pytest

from sr_arq.arq.sender import SRSender
from sr_arq.arq.receiver import SRReceiver
from sr_arq.arq.timer import SingleShotTimer
from sr_arq.utils.logger import SimulationLogger, LogLevel
from sr_arq.utils.metrics import MetricsCollector


@pytest.fixture
def quiet_logger():
    return SimulationLogger(name="Test", level=LogLevel.CRITICAL + 1)


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def clock():
    """Mutable simulated clock: set clock.now to move time."""
    class Clock:
        now = 0.0
        
        def __call__(self):
            return self.now
    
    return Clock()


@pytest.fixture
def timer(clock, quiet_logger):
    return SingleShotTimer(clock=clock, logger=quiet_logger)


@pytest.fixture
def sender(timer, metrics, quiet_logger):
    """Sender whose outgoing packets are collected in sender.sent."""
    sent = []
    s = SRSender(
        timer=timer,
        to_layer3=sent.append,
        metrics=metrics,
        logger=quiet_logger
    )
    s.sent = sent
    return s


@pytest.fixture
def receiver(metrics, quiet_logger):
    """Receiver collecting ACKs in receiver.acks and payloads in receiver.delivered."""
    acks = []
    delivered = []
    r = SRReceiver(
        to_layer3=acks.append,
        to_layer5=delivered.append,
        metrics=metrics,
        logger=quiet_logger
    )
    r.acks = acks
    r.delivered = delivered
    return r
