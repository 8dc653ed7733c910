"""
Factory Kernel

The inventory core of a knitting-factory operations tracker:
- Raw material stock keyed by type, size and color
- Reversible production, processing and sales postings
- Per-model in-production and finished counters
- One immutable state snapshot with a single commit point
"""

__version__ = "0.1.0"
