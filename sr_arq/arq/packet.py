"""
Packet Structure for the Selective Repeat ARQ Protocol

This module defines the fixed-layout wire unit exchanged between the
sender and the receiver, and its additive integrity checksum.
"""

import struct
from dataclasses import dataclass, replace
from typing import Optional

from ..config import PAYLOAD_SIZE, NOT_IN_USE, ACK_FILLER


@dataclass
class Packet:
    """
    Wire unit.
    
    Layout (32 bytes, network byte order):
        - seqnum: 4 bytes (signed int)
        - acknum: 4 bytes (signed int, NOT_IN_USE on data packets)
        - checksum: 4 bytes (signed int)
        - payload: PAYLOAD_SIZE bytes
    
    Attributes:
        seqnum: Sequence number of the packet
        acknum: Sequence number being acknowledged
        checksum: Integrity value carried with the packet
        payload: Fixed-size payload block
    """
    
    seqnum: int
    acknum: int
    checksum: int = 0
    payload: bytes = ACK_FILLER * PAYLOAD_SIZE
    
    WIRE_FORMAT = f'!iii{PAYLOAD_SIZE}s'
    WIRE_SIZE = struct.calcsize(WIRE_FORMAT)
    
    def __post_init__(self):
        if len(self.payload) != PAYLOAD_SIZE:
            raise ValueError(
                f"Payload must be exactly {PAYLOAD_SIZE} bytes, "
                f"got {len(self.payload)}"
            )
    
    @property
    def is_ack(self) -> bool:
        return self.acknum != NOT_IN_USE
    
    def copy(self) -> 'Packet':
        """Independent copy, so the channel can damage it freely."""
        return replace(self)
    
    def serialize(self) -> bytes:
        """Pack the packet into its wire layout."""
        return struct.pack(
            self.WIRE_FORMAT,
            self.seqnum,
            self.acknum,
            self.checksum,
            self.payload
        )
    
    @classmethod
    def deserialize(cls, data: bytes) -> Optional['Packet']:
        """
        Unpack a packet from its wire layout.
        
        Args:
            data: Serialized packet bytes
            
        Returns:
            Packet, or None if the buffer is too short
        """
        if len(data) < cls.WIRE_SIZE:
            return None
        seqnum, acknum, checksum, payload = struct.unpack(
            cls.WIRE_FORMAT, data[:cls.WIRE_SIZE]
        )
        return cls(seqnum=seqnum, acknum=acknum, checksum=checksum, payload=payload)
    
    def __repr__(self) -> str:
        return (f"Packet(seq={self.seqnum}, ack={self.acknum}, "
                f"checksum={self.checksum}, payload={self.payload!r})")


def compute_checksum(packet: Packet) -> int:
    """
    Additive checksum: seqnum + acknum + every payload byte.
    
    The carried checksum field is not part of the sum.
    """
    return packet.seqnum + packet.acknum + sum(packet.payload)


def is_corrupted(packet: Packet) -> bool:
    """True iff the recomputed checksum differs from the carried one."""
    return compute_checksum(packet) != packet.checksum


def make_data_packet(seqnum: int, message: bytes) -> Packet:
    """
    Build a data packet carrying one application message.
    
    Args:
        seqnum: Sequence number to assign
        message: PAYLOAD_SIZE-byte message
        
    Returns:
        Data packet with its checksum filled in
    """
    packet = Packet(seqnum=seqnum, acknum=NOT_IN_USE, payload=bytes(message))
    packet.checksum = compute_checksum(packet)
    return packet


def make_ack_packet(seqnum: int, acknum: int) -> Packet:
    """Build a pure acknowledgment with filler payload."""
    packet = Packet(seqnum=seqnum, acknum=acknum, payload=ACK_FILLER * PAYLOAD_SIZE)
    packet.checksum = compute_checksum(packet)
    return packet
