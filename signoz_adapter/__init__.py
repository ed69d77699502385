"""SigNoz log adapter — filters, normalizes, batches and ships container logs."""

__version__ = "0.1.0"
