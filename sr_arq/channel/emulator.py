"""
Lossy Channel Emulator

This module implements one direction of the simulated point-to-point
channel: packets may be lost, corrupted or delayed, but packets that
survive arrive in the order they were sent.
"""

import numpy as np
from typing import Optional, Tuple

from ..config import (
    MIN_CHANNEL_DELAY, CHANNEL_DELAY_SPREAD,
    P_CORRUPT_PAYLOAD, P_CORRUPT_SEQNUM, CORRUPTED_FIELD
)
from ..arq.packet import Packet
from ..utils.logger import SimulationLogger, get_logger
from ..utils.metrics import MetricsCollector


def _check_probability(name: str, value: float):
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")


class LossyChannel:
    """
    Order-preserving channel with loss, corruption and random delay.
    
    Attributes:
        loss_prob: Probability that a packet is dropped
        corrupt_prob: Probability that a surviving packet is damaged
        rng: Random number generator
        last_arrival: Arrival time of the last packet scheduled
    """
    
    def __init__(
        self,
        loss_prob: float = 0.0,
        corrupt_prob: float = 0.0,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        metrics: Optional[MetricsCollector] = None,
        logger: Optional[SimulationLogger] = None
    ):
        """
        Initialize the channel.
        
        Args:
            loss_prob: Probability of loss
            corrupt_prob: Probability of corruption
            seed: Random seed (ignored when rng is given)
            rng: Shared random generator
            metrics: Reporting counters
            logger: Trace output (global logger if None)
        """
        _check_probability("loss_prob", loss_prob)
        _check_probability("corrupt_prob", corrupt_prob)
        
        self.loss_prob = loss_prob
        self.corrupt_prob = corrupt_prob
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.metrics = metrics if metrics is not None else MetricsCollector()
        self.logger = logger or get_logger()
        
        self.last_arrival = 0.0
    
    def transmit(self, packet: Packet, now: float) -> Optional[Tuple[float, Packet]]:
        """
        Put a packet on the channel.
        
        The sender keeps its own packet; only a copy travels.
        
        Args:
            packet: Packet to transmit
            now: Current simulated time
            
        Returns:
            (arrival_time, packet as it will arrive), or None if lost
        """
        self.metrics.record_packet_sent()
        
        if self.rng.random() < self.loss_prob:
            self.metrics.record_packet_lost()
            self.logger.packet_lost(packet.seqnum, packet.acknum)
            return None
        
        in_flight = packet.copy()
        
        if self.rng.random() < self.corrupt_prob:
            self._corrupt(in_flight)
            self.metrics.record_packet_corrupted()
            self.logger.packet_corrupted(packet.seqnum, packet.acknum)
        
        arrival = self._arrival_time(now)
        return arrival, in_flight
    
    def _corrupt(self, packet: Packet):
        """Damage a packet in place, leaving its checksum untouched."""
        x = self.rng.random()
        if x < P_CORRUPT_PAYLOAD:
            packet.payload = b'Z' + packet.payload[1:]
        elif x < P_CORRUPT_PAYLOAD + P_CORRUPT_SEQNUM:
            packet.seqnum = CORRUPTED_FIELD
        else:
            packet.acknum = CORRUPTED_FIELD
    
    def _arrival_time(self, now: float) -> float:
        """Queue behind the last packet in flight on this direction."""
        start = max(now, self.last_arrival)
        arrival = start + MIN_CHANNEL_DELAY + CHANNEL_DELAY_SPREAD * self.rng.random()
        self.last_arrival = arrival
        return arrival
