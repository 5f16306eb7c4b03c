"""
symbols/items.py

Schema items and the SVG drawings they contribute to the situation plan.
"""

from __future__ import annotations

from dataclasses import dataclass

from utils import next_version


@dataclass
class SVGSymbol:
    """Drawing of a schema item relative to its connection point.

    The symbol spans ``xleft + xright`` horizontally and ``yup + ydown``
    vertically; ``data`` holds the SVG body without the outer ``<svg>`` tag.
    """
    xleft: float = 0.0
    xright: float = 0.0
    yup: float = 0.0
    ydown: float = 0.0
    data: str = ""

    @property
    def width(self) -> float:
        return self.xleft + self.xright

    @property
    def height(self) -> float:
        return self.yup + self.ydown


class ElectroItem:
    """Base class for items of the one-line diagram.

    Changing ``nr`` or ``adres`` bumps ``version`` so views can tell that
    the drawing of the item needs to be refreshed without regenerating it.
    """

    # Symbols are mirrored rather than drawn upside down when rotated past 90 degrees
    ROTATES_360 = True
    # SVG <defs> content referenced by ``to_svg`` through <use> elements
    DEFS = ""

    def __init__(self, item_id: int, nr: str = "", adres: str = ""):
        self.id = item_id
        self._nr = nr
        self._adres = adres
        self.version = next_version()

    def touch(self) -> None:
        self.version = next_version()

    @property
    def nr(self) -> str:
        return self._nr

    @nr.setter
    def nr(self, nr: str) -> None:
        if nr != self._nr:
            self._nr = nr
            self.touch()

    @property
    def adres(self) -> str:
        return self._adres

    @adres.setter
    def adres(self, adres: str) -> None:
        if adres != self._adres:
            self._adres = adres
            self.touch()

    def set_nr(self, nr: str) -> None:
        self.nr = nr

    def set_adres(self, adres: str) -> None:
        self.adres = adres

    def readable_address(self) -> str:
        """Address shown in the label when the element uses automatic addressing."""
        if self.adres:
            return self.adres
        return self.nr

    def to_svg(self) -> SVGSymbol:
        raise NotImplementedError


class Ventilator(ElectroItem):
    """Fan: a short conductor followed by the ventilator circle."""

    DEFS = (
        '<g id="ventilator">'
        '<circle cx="14" cy="0" r="14" fill="none" stroke="black"/>'
        '<circle cx="8" cy="0" r="5" fill="none" stroke="black"/>'
        '<circle cx="20" cy="0" r="5" fill="none" stroke="black"/>'
        '</g>'
    )

    def to_svg(self) -> SVGSymbol:
        symbol = SVGSymbol(xleft=1, xright=49, yup=25, ydown=25)
        symbol.data = (
            '<line x1="1" y1="25" x2="21" y2="25" stroke="black"></line>'
            '<use xlink:href="#ventilator" x="21" y="25"></use>'
        )
        return symbol
