"""
Fussball Elo: team ratings from merged football match sources.
"""

__version__ = '0.1.0'
