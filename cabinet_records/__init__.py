"""Records management core: cabinets, records, versions and PDF intake."""

__version__ = "0.1.0"
