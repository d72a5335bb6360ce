"""
KasaFarm Records - Source Package

Keeps a single farmer's business records (expenses, capital, sales,
profit) in sync with a remote store and derives dashboard totals and
CSV exports from them.

DESIGN PRINCIPLES:
1. Remote confirms → Cache updates (write-through, never speculative)
2. Fail visibly, return failures instead of hiding them
3. One identity's data is never shown to another
4. Totals and exports are pure functions of the cache
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "KasaFarm Team"
