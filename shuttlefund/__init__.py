"""Mini README: Core package initializer for Shuttlefund.

Shuttlefund tracks a badminton group's shared costs and communal fund. The
``ledger`` package holds the snapshot model and its reducers, ``balances``
derives fund and member positions, ``sync`` stores snapshots, and
``interface`` serves everything over HTTP. Only the logger factory is
re-exported here so importing the package stays cheap.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
