"""
Aer: end-to-end encrypted context capture.

A client for the Aer context store that provides:
- Capture of arbitrary content into a canonical payload
- Client-side encryption with a token-derived key
- Heuristic filtering of noisy captures
- Re-ranking of remote search results
"""

__version__ = "0.1.0"
