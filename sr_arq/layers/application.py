"""
Application Layer

This module implements the message source above the sender and the
delivery check above the receiver.
"""

import hashlib
from typing import List, Tuple, Optional

import numpy as np

from ..config import PAYLOAD_SIZE, DEFAULT_LAMBDA


class MessageGenerator:
    """
    Produces fixed-size messages at random intervals.
    
    Message n is PAYLOAD_SIZE copies of chr(ord('a') + n % 26); the gap
    between messages is uniform on [0, 2 * lambda].
    """
    
    def __init__(
        self,
        mean_interval: float = DEFAULT_LAMBDA,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None
    ):
        if mean_interval <= 0:
            raise ValueError(f"Mean interval must be positive, got {mean_interval}")
        self.mean_interval = mean_interval
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.count = 0
    
    @staticmethod
    def make_message(n: int) -> bytes:
        """The n-th message."""
        return bytes([ord('a') + n % 26]) * PAYLOAD_SIZE
    
    def next_message(self) -> bytes:
        message = self.make_message(self.count)
        self.count += 1
        return message
    
    def next_interval(self) -> float:
        return self.mean_interval * 2 * self.rng.random()


class DeliveryVerifier:
    """
    Utility for verifying in-order, exactly-once delivery.
    
    Messages rejected by a full send window never enter the protocol,
    so delivery is checked against the accepted messages only.
    """
    
    def __init__(self):
        self.accepted: List[bytes] = []
        self.delivered: List[bytes] = []
    
    def record_accepted(self, message: bytes):
        self.accepted.append(bytes(message))
    
    def record_delivered(self, payload: bytes):
        self.delivered.append(bytes(payload))
    
    @staticmethod
    def calculate_checksum(messages: List[bytes]) -> str:
        """Calculate MD5 checksum of a message stream."""
        return hashlib.md5(b''.join(messages)).hexdigest()
    
    def verify(self) -> Tuple[bool, dict]:
        """
        Check that delivered messages are a prefix of accepted ones.
        
        Returns:
            Tuple of (valid, details)
        """
        delivered_count = len(self.delivered)
        accepted_count = len(self.accepted)
        
        first_mismatch = -1
        for i, payload in enumerate(self.delivered):
            if i >= accepted_count or payload != self.accepted[i]:
                first_mismatch = i
                break
        
        in_order = first_mismatch == -1
        complete = in_order and delivered_count == accepted_count
        
        details = {
            'accepted': accepted_count,
            'delivered': delivered_count,
            'in_order': in_order,
            'complete': complete,
            'first_mismatch': first_mismatch,
            'accepted_checksum': self.calculate_checksum(self.accepted),
            'delivered_checksum': self.calculate_checksum(self.delivered)
        }
        
        return in_order, details
    
    def reset(self):
        self.accepted.clear()
        self.delivered.clear()
