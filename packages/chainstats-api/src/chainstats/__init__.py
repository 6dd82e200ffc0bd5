"""chainstats API — derived ledger statistics for chain dashboards."""

__version__ = "0.1.0"
