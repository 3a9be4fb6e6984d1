"""
Metrics Collection

This module provides the reporting counters incremented by the
protocol engines and the channel emulator during a run.
"""

from typing import Optional, Dict


class MetricsCollector:
    """
    Collects run counters for the simulation.
    
    Counters incremented by the engines:
        total_acks_received, new_acks, packets_resent,
        packets_received, window_full
    
    Counters incremented by the emulator:
        messages_generated, messages_accepted, messages_delivered,
        packets_sent, packets_lost, packets_corrupted, timeouts
    
    Attributes:
        start_time: Simulation start time
        end_time: Simulation end time
    """
    
    def __init__(self):
        """Initialize metrics collector."""
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        
        # Sender engine
        self.total_acks_received = 0
        self.new_acks = 0
        self.packets_resent = 0
        self.window_full = 0
        
        # Receiver engine
        self.packets_received = 0
        
        # Application layer
        self.messages_generated = 0
        self.messages_accepted = 0
        self.messages_delivered = 0
        
        # Channel
        self.packets_sent = 0
        self.packets_lost = 0
        self.packets_corrupted = 0
        
        # Timer
        self.timeouts = 0
    
    def start(self, time: float):
        """Mark simulation start."""
        self.start_time = time
    
    def finish(self, time: float):
        """Mark simulation end."""
        self.end_time = time
    
    def record_ack_received(self):
        """Record an uncorrupted acknowledgment reaching the sender."""
        self.total_acks_received += 1
    
    def record_new_ack(self):
        """Record a non-duplicate acknowledgment."""
        self.new_acks += 1
    
    def record_retransmission(self):
        """Record a packet resent on timeout."""
        self.packets_resent += 1
    
    def record_window_full(self):
        """Record a message rejected because the send window is full."""
        self.window_full += 1
    
    def record_packet_received(self):
        """Record an uncorrupted data packet reaching the receiver."""
        self.packets_received += 1
    
    def record_message_generated(self, accepted: bool):
        """Record a message handed down by layer 5."""
        self.messages_generated += 1
        if accepted:
            self.messages_accepted += 1
    
    def record_message_delivered(self):
        """Record a message delivered up to layer 5."""
        self.messages_delivered += 1
    
    def record_packet_sent(self):
        """Record a packet handed to the channel."""
        self.packets_sent += 1
    
    def record_packet_lost(self):
        """Record a packet dropped by the channel."""
        self.packets_lost += 1
    
    def record_packet_corrupted(self):
        """Record a packet damaged by the channel."""
        self.packets_corrupted += 1
    
    def record_timeout(self):
        """Record a timer interrupt."""
        self.timeouts += 1
    
    @property
    def total_time(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return self.end_time - self.start_time
    
    def calculate_throughput(self) -> float:
        """
        Calculate throughput.
        
        Throughput = Messages Delivered / Simulated Time
        
        Returns:
            Delivered messages per simulated time unit
        """
        total_time = self.total_time
        if total_time <= 0:
            return 0.0
        return self.messages_delivered / total_time
    
    def calculate_retransmission_rate(self) -> float:
        """Retransmissions / accepted messages."""
        if self.messages_accepted <= 0:
            return 0.0
        return self.packets_resent / self.messages_accepted
    
    def calculate_acceptance_rate(self) -> float:
        """Accepted / generated messages."""
        if self.messages_generated <= 0:
            return 0.0
        return self.messages_accepted / self.messages_generated
    
    def get_counters(self) -> Dict[str, int]:
        """Get the raw counters."""
        return {
            'total_acks_received': self.total_acks_received,
            'new_acks': self.new_acks,
            'packets_resent': self.packets_resent,
            'packets_received': self.packets_received,
            'window_full': self.window_full,
            'messages_generated': self.messages_generated,
            'messages_accepted': self.messages_accepted,
            'messages_delivered': self.messages_delivered,
            'packets_sent': self.packets_sent,
            'packets_lost': self.packets_lost,
            'packets_corrupted': self.packets_corrupted,
            'timeouts': self.timeouts,
        }
    
    def get_summary(self) -> Dict:
        """
        Get comprehensive metrics summary.
        
        Returns:
            Dictionary with all metrics
        """
        return {
            'total_time': self.total_time,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'throughput': self.calculate_throughput(),
            'retransmission_rate': self.calculate_retransmission_rate(),
            'acceptance_rate': self.calculate_acceptance_rate(),
            **self.get_counters()
        }
    
    def to_csv_row(self) -> Dict:
        """Get metrics as a flat dictionary suitable for CSV export."""
        summary = self.get_summary()
        summary.pop('start_time')
        summary.pop('end_time')
        return summary
    
    def reset(self):
        """Reset all metrics."""
        self.__init__()
