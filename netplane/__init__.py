"""netplane: route table reconciliation for cluster networking."""

__version__ = "0.1.0"
