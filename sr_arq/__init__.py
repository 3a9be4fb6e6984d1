"""
Selective Repeat ARQ simulator.

Sender and receiver engines for a Selective Repeat protocol running over
an emulated lossy, corrupting, order-preserving channel.
"""

__version__ = "1.0.0"
