"""
Crime Map - incident record pipeline

Ingests a crime record CSV, normalizes and classifies each record, applies
interactive filters and derives the aggregate views consumed by the map and
chart front ends.
"""

__version__ = "0.1.0"
