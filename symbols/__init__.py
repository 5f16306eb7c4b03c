"""
symbols package

One-line-diagram items that can be placed on the situation plan as symbols.
"""

from symbols.items import ElectroItem, SVGSymbol, Ventilator
from symbols.schema import ElectroSchema

__all__ = [
    "ElectroItem",
    "SVGSymbol",
    "Ventilator",
    "ElectroSchema",
]
