"""
Channel package - Simulated unreliable channel.
"""

from .emulator import LossyChannel

__all__ = ['LossyChannel']
