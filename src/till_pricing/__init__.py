"""
Till Pricing Package

Pricing and basket calculator for a small bar/retail till.
Resolves unit prices through shared price bands or per-product overrides
and picks the cheapest bundle deal for each basket line.
"""

__version__ = "1.0.0"
