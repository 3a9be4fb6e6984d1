"""
Layers package - Application layer around the protocol.
"""

from .application import MessageGenerator, DeliveryVerifier

__all__ = ['MessageGenerator', 'DeliveryVerifier']
