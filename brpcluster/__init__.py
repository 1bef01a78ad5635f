"""Station loading, k-medoids clustering and transfer evaluation for bike-sharing rebalancing."""

__version__ = "0.1.0"