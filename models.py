"""
models.py

Data models and constants for the situation plan editor.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from symbols import ElectroItem, ElectroSchema
from utils import ImportedImage, load_image_as_svg, next_version, symbol_to_svg


# ----------------------------
# Label anchor and address type
# ----------------------------

class LabelAnchor(str, Enum):
    """Preferred side of a box where its label is placed."""
    LEFT = "left"
    RIGHT = "right"
    ABOVE = "above"
    BELOW = "below"
    CENTER = "center"


class AdresType(str, Enum):
    """Where the label text of a schema symbol comes from."""
    AUTO = "auto"      # readable address of the schema item
    MANUAL = "manual"  # text typed by the user


# Maps stored/legacy anchor names to a LabelAnchor.
# Plans saved by the Dutch-language editor use links/rechts/boven/onder/centraal.
ANCHOR_ALIAS_MAP: Dict[str, LabelAnchor] = {
    "left":     LabelAnchor.LEFT,
    "right":    LabelAnchor.RIGHT,
    "above":    LabelAnchor.ABOVE,
    "below":    LabelAnchor.BELOW,
    "center":   LabelAnchor.CENTER,
    "links":    LabelAnchor.LEFT,
    "rechts":   LabelAnchor.RIGHT,
    "boven":    LabelAnchor.ABOVE,
    "onder":    LabelAnchor.BELOW,
    "centraal": LabelAnchor.CENTER,
    "midden":   LabelAnchor.CENTER,
}

ADRES_TYPE_ALIAS_MAP: Dict[str, AdresType] = {
    "auto":        AdresType.AUTO,
    "manual":      AdresType.MANUAL,
    "automatisch": AdresType.AUTO,
    "manueel":     AdresType.MANUAL,
}


def resolve_anchor(value: Any, fallback: LabelAnchor = LabelAnchor.CENTER) -> LabelAnchor:
    """Resolve an anchor name (English or legacy Dutch) to a LabelAnchor.

    Args:
        value: A LabelAnchor or its name.
        fallback: Anchor returned for unknown names.  Defaults to center.
    """
    if isinstance(value, LabelAnchor):
        return value
    if not isinstance(value, str):
        return fallback
    return ANCHOR_ALIAS_MAP.get(value.strip().lower(), fallback)


def resolve_adres_type(value: Any, fallback: AdresType = AdresType.AUTO) -> AdresType:
    if isinstance(value, AdresType):
        return value
    if not isinstance(value, str):
        return fallback
    return ADRES_TYPE_ALIAS_MAP.get(value.strip().lower(), fallback)


@dataclass
class ElementProperties:
    """Values collected by the element properties dialog.

    ``electro_id`` is None when the user did not enter a valid schema id.
    """
    electro_id: Optional[int] = None
    adrestype: AdresType = AdresType.AUTO
    adres: str = ""
    adreslocation: LabelAnchor = LabelAnchor.CENTER
    labelfontsize: Optional[int] = None
    scale: float = 1.0
    rotate: float = 0.0


_element_ids = itertools.count(1)


def _new_element_id() -> str:
    return f"SP_{next(_element_ids)}"


# ----------------------------
# Situation plan element
# ----------------------------

class SituationPlanElement:
    """
    A box on the situation plan.

    A box either draws a symbol of the one-line diagram (``electro_item_id``
    refers to an item of the plan's schema) or an imported image.  The
    position is the center of the box in canvas units; ``sizex``/``sizey``
    are the unscaled content size.

    Every mutation that changes what the box looks like goes through a
    setter that bumps ``version``, so views can detect stale content
    without regenerating the SVG.
    """

    def __init__(
        self,
        element_id: Optional[str] = None,
        page: int = 1,
        posx: float = 0.0,
        posy: float = 0.0,
        sizex: float = 0.0,
        sizey: float = 0.0,
        scale: float = 1.0,
        rotate: float = 0.0,
        labelfontsize: Optional[int] = None,
        adrestype: AdresType = AdresType.AUTO,
        adres: str = "",
        adreslocation: LabelAnchor = LabelAnchor.CENTER,
        electro_item_id: Optional[int] = None,
        image: Optional[ImportedImage] = None,
        rotates_360: bool = False,
    ):
        self.id = element_id or _new_element_id()
        self.page = page
        self.posx = posx
        self.posy = posy
        self.sizex = sizex
        self.sizey = sizey
        self.rotate = rotate
        self.adreslocation = resolve_anchor(adreslocation)
        self._labelfontsize = labelfontsize
        self._adrestype = resolve_adres_type(adrestype)
        self._adres = adres
        self._electro_item_id = electro_item_id
        self._image = image
        self._scale = scale
        self._rotates_360 = rotates_360

        # Computed label center, written by the layout engine
        self.labelposx = posx
        self.labelposy = posy

        self.schema: Optional[ElectroSchema] = None
        self.needs_view_update = True
        self.version = next_version()

        if image is not None and not (sizex and sizey):
            self.sizex, self.sizey = image.width, image.height

    def __repr__(self) -> str:
        return f"SituationPlanElement(id={self.id!r}, page={self.page}, pos=({self.posx}, {self.posy}))"

    def touch(self) -> None:
        """Mark the content of this element as changed."""
        self.version = next_version()
        self.needs_view_update = True

    # ---- content fields ----
    # Assigning any of these marks the drawn content as stale.

    @property
    def labelfontsize(self) -> Optional[int]:
        return self._labelfontsize

    @labelfontsize.setter
    def labelfontsize(self, size: Optional[int]) -> None:
        if size != self._labelfontsize:
            self._labelfontsize = size
            self.touch()

    @property
    def adrestype(self) -> AdresType:
        return self._adrestype

    @adrestype.setter
    def adrestype(self, value) -> None:
        value = resolve_adres_type(value)
        if value != self._adrestype:
            self._adrestype = value
            self.touch()

    @property
    def adres(self) -> str:
        return self._adres

    @adres.setter
    def adres(self, value: str) -> None:
        value = value or ""
        if value != self._adres:
            self._adres = value
            self.touch()

    @property
    def electro_item_id(self) -> Optional[int]:
        return self._electro_item_id

    @electro_item_id.setter
    def electro_item_id(self, value: Optional[int]) -> None:
        if value != self._electro_item_id:
            self._electro_item_id = value
            self.touch()

    @property
    def image(self) -> Optional[ImportedImage]:
        return self._image

    @image.setter
    def image(self, value: Optional[ImportedImage]) -> None:
        if value is not self._image:
            self._image = value
            self.touch()

    # ---- scale / label properties ----

    def get_scale(self) -> float:
        return self._scale

    def set_scale(self, scale: float) -> None:
        if scale != self._scale:
            self._scale = scale
            self.touch()

    def set_label_font_size(self, size: Optional[int]) -> None:
        self.labelfontsize = size

    def set_adres(self, adrestype: AdresType, adres: str, adreslocation: LabelAnchor) -> None:
        self.adrestype = adrestype
        self.adres = adres
        self.adreslocation = resolve_anchor(adreslocation)

    def set_electro_item_id(self, electro_item_id: Optional[int]) -> None:
        self.electro_item_id = electro_item_id

    # ---- schema / capability queries ----

    def electro_item(self) -> Optional[ElectroItem]:
        if self.electro_item_id is None or self.schema is None:
            return None
        return self.schema.get_item(self.electro_item_id)

    def is_eendraadschema_symbool(self) -> bool:
        """True when the box draws a symbol of the one-line diagram."""
        return self.electro_item_id is not None

    def rotates_360_degrees(self) -> bool:
        """True when the box is mirrored instead of turned upside down past 90 degrees."""
        if self.is_eendraadschema_symbool():
            item = self.electro_item()
            return bool(item is not None and item.ROTATES_360)
        return self._rotates_360

    def has_valid_source(self) -> bool:
        if self.is_eendraadschema_symbool():
            return self.electro_item() is not None
        return True

    # ---- content queries ----

    def content_key(self) -> Tuple[int, Optional[int]]:
        """Version stamp of everything that determines the drawn content and label text."""
        item = self.electro_item()
        return (self.version, item.version if item is not None else None)

    def symbol_size(self) -> Optional[Tuple[float, float]]:
        """Unscaled content size from the source, or None when there is no source."""
        if self.is_eendraadschema_symbool():
            item = self.electro_item()
            if item is None:
                return None
            symbol = item.to_svg()
            return symbol.width, symbol.height
        if self.image is not None:
            return self.image.width, self.image.height
        return None

    def update_size(self) -> None:
        size = self.symbol_size()
        if size is not None:
            self.sizex, self.sizey = size

    def get_scaled_svg(self) -> Optional[str]:
        """SVG markup of the box content at the current scale."""
        if self.is_eendraadschema_symbool():
            item = self.electro_item()
            if item is None:
                return None
            return symbol_to_svg(item.to_svg(), item.DEFS, self._scale)
        if self.image is not None:
            return self.image.to_svg(self._scale)
        return None

    def get_adres(self) -> str:
        if self.is_eendraadschema_symbool() and self.adrestype == AdresType.AUTO:
            item = self.electro_item()
            return item.readable_address() if item is not None else ""
        return self.adres

    def get_adres_location(self) -> LabelAnchor:
        return self.adreslocation

    # ---- serialization ----

    def to_record(self) -> Dict[str, Any]:
        rec: Dict[str, Any] = {
            "id": self.id,
            "page": self.page,
            "posx": self.posx,
            "posy": self.posy,
            "sizex": self.sizex,
            "sizey": self.sizey,
            "scale": self._scale,
            "rotate": self.rotate,
            "labelfontsize": self.labelfontsize,
            "adrestype": self.adrestype.value,
            "adres": self.adres,
            "adreslocation": self.adreslocation.value,
        }
        if self.electro_item_id is not None:
            rec["electro_item_id"] = self.electro_item_id
        if self.image is not None:
            rec["image"] = {
                "body": self.image.body,
                "view_box": list(self.image.view_box),
                "width": self.image.width,
                "height": self.image.height,
            }
            rec["rotates_360"] = self._rotates_360
        return rec

    @classmethod
    def from_record(cls, rec: Dict[str, Any]) -> "SituationPlanElement":
        image = None
        img = rec.get("image")
        if isinstance(img, dict):
            vb = img.get("view_box") or [0, 0, img.get("width", 0), img.get("height", 0)]
            image = ImportedImage(
                body=img.get("body", ""),
                view_box=(float(vb[0]), float(vb[1]), float(vb[2]), float(vb[3])),
                width=float(img.get("width", 0)),
                height=float(img.get("height", 0)),
            )
        return cls(
            element_id=rec.get("id"),
            page=int(rec.get("page", 1)),
            posx=float(rec.get("posx", 0)),
            posy=float(rec.get("posy", 0)),
            sizex=float(rec.get("sizex", 0)),
            sizey=float(rec.get("sizey", 0)),
            scale=float(rec.get("scale", 1)),
            rotate=float(rec.get("rotate", 0)),
            labelfontsize=rec.get("labelfontsize"),
            adrestype=rec.get("adrestype", AdresType.AUTO),
            adres=rec.get("adres", ""),
            adreslocation=rec.get("adreslocation", LabelAnchor.CENTER),
            electro_item_id=rec.get("electro_item_id"),
            image=image,
            rotates_360=bool(rec.get("rotates_360", False)),
        )


# ----------------------------
# Situation plan
# ----------------------------

class SituationPlan:
    """
    Ordered collection of situation plan elements spread over pages.

    The order of ``elements`` is the stacking order, bottom to top.
    """

    def __init__(self, schema: Optional[ElectroSchema] = None):
        self.schema = schema if schema is not None else ElectroSchema()
        self.elements: List[SituationPlanElement] = []
        self.active_page = 1
        self.num_pages = 1

    def find(self, element_id: Optional[str]) -> Optional[SituationPlanElement]:
        if element_id is None:
            return None
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def add_element(self, element: SituationPlanElement) -> SituationPlanElement:
        """Append an element on top of the stack, keeping its page within range."""
        element.schema = self.schema
        element.page = min(max(1, int(element.page)), self.num_pages)
        self.elements.append(element)
        return element

    def remove_element(self, element: Optional[SituationPlanElement]) -> None:
        if element is None:
            return
        self.elements = [e for e in self.elements if e is not element]

    def sync_to_eendraadschema(self) -> List[str]:
        """
        Drop elements whose schema item no longer exists.

        Returns:
            Ids of the removed elements.
        """
        pruned = [e.id for e in self.elements if not e.has_valid_source()]
        if pruned:
            self.elements = [e for e in self.elements if e.has_valid_source()]
        return pruned

    def order_by_z_index(self, ranks: Dict[str, int]) -> None:
        """Re-sort the elements ascending by rank. Elements without a rank count as 0."""
        self.elements.sort(key=lambda e: ranks.get(e.id, 0))

    def add_element_from_file(self, path, page: int, posx: float, posy: float) -> SituationPlanElement:
        """
        Import an external image as a new element.

        Raises:
            ValueError: If the file cannot be read as an image.
        """
        image = load_image_as_svg(path)
        element = SituationPlanElement(page=page, posx=posx, posy=posy, image=image)
        return self.add_element(element)

    def add_element_from_electro_item(
        self,
        electro_id,
        page: int,
        posx: float,
        posy: float,
        adrestype: AdresType,
        adres: str,
        adreslocation: LabelAnchor,
        labelfontsize: Optional[int],
        scale: float,
        rotate: float,
    ) -> Optional[SituationPlanElement]:
        """Place a symbol of the one-line diagram. Returns None when the id is unknown."""
        item = self.schema.get_item(electro_id)
        if item is None:
            return None
        element = SituationPlanElement(
            page=page,
            posx=posx,
            posy=posy,
            scale=scale,
            rotate=rotate,
            labelfontsize=labelfontsize,
            adrestype=adrestype,
            adres=adres,
            adreslocation=adreslocation,
            electro_item_id=item.id,
        )
        self.add_element(element)
        element.update_size()
        return element

    def add_page(self) -> int:
        self.num_pages += 1
        return self.num_pages

    def delete_page(self, page: int) -> bool:
        """
        Remove a page with all its elements; later pages move one page down.

        Returns:
            False when the page does not exist or is the last remaining page.
        """
        if self.num_pages <= 1 or not 1 <= page <= self.num_pages:
            return False
        self.elements = [e for e in self.elements if e.page != page]
        for element in self.elements:
            if element.page > page:
                element.page -= 1
        self.num_pages -= 1
        self.active_page = min(self.active_page, self.num_pages)
        return True

    # ---- serialization ----

    def to_record(self) -> Dict[str, Any]:
        return {
            "active_page": self.active_page,
            "num_pages": self.num_pages,
            "elements": [e.to_record() for e in self.elements],
        }

    def load_record(self, rec: Dict[str, Any]) -> None:
        """Replace the plan contents with a record produced by ``to_record``."""
        self.num_pages = max(1, int(rec.get("num_pages", 1)))
        self.active_page = min(max(1, int(rec.get("active_page", 1))), self.num_pages)
        self.elements = []
        for erec in rec.get("elements", []):
            self.add_element(SituationPlanElement.from_record(erec))
