"""
Chat Screenshot Editor - Layer Store

Ordered collection of chat layers with an active selection.

Invariants:
    - The store never holds zero layers; removing the last one is a no-op
    - Layer ids are assigned monotonically and never reused, even after removal
    - Removing a layer deletes its censor regions

Methods:
    - create
    - select
    - remove
    - move_up / move_down
    - get / index_of
    - active_layer
"""

import logging
from typing import List, Optional

from models.layer import Layer
from models.transform import Transform
from constants import DEFAULT_LAYER_NAME_PREFIX

logger = logging.getLogger(__name__)


class LayerStore:
    """Ordered chat layers (index 0 is drawn first).

    Args:
        parser: ChatParser used to classify layer text
        censor_store: CensorStore whose regions are cascaded on removal
        create_default: Start with one default layer
    """

    def __init__(self, parser, censor_store, create_default: bool = True):
        self.parser = parser
        self.censor_store = censor_store
        self._layers: List[Layer] = []
        self._next_id = 1
        self._selected_id: Optional[int] = None
        if create_default:
            self.create()

    # ========================================
    # Collection Access
    # ========================================

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self):
        return iter(list(self._layers))

    @property
    def layers(self) -> List[Layer]:
        """Layers in draw order (copy)."""
        return list(self._layers)

    @property
    def next_id(self) -> int:
        return self._next_id

    def get(self, layer_id: int) -> Optional[Layer]:
        for layer in self._layers:
            if layer.id == layer_id:
                return layer
        return None

    def index_of(self, layer_id: int) -> int:
        """Index of a layer, -1 if not found."""
        for index, layer in enumerate(self._layers):
            if layer.id == layer_id:
                return index
        return -1

    # ========================================
    # CRUD
    # ========================================

    def create(self, name: Optional[str] = None, text: str = '',
               transform: Optional[Transform] = None, visible: bool = True,
               layer_id: Optional[int] = None) -> Layer:
        """Create and append a layer.

        Args:
            name: Display name, defaults to "Layer N" for the new id
            text: Raw chat text; parsed immediately when non-empty
            transform: Placement, defaults to identity
            visible: Visibility flag
            layer_id: Explicit id (snapshot restore); must not be in use

        Returns:
            The new Layer

        Raises:
            ValueError: If layer_id is already taken
        """
        if layer_id is None:
            layer_id = self._next_id
        elif self.get(layer_id) is not None:
            raise ValueError(f"Layer id {layer_id} already in use")
        self._next_id = max(self._next_id, layer_id + 1)

        if not name:
            name = f"{DEFAULT_LAYER_NAME_PREFIX} {layer_id}"

        layer = Layer(layer_id, name, text or '', transform, visible)
        if layer.raw_text:
            layer.reparse(self.parser)
        self._layers.append(layer)

        logger.debug(f"Created layer {layer_id} ({name})")
        return layer

    def select(self, layer_id: int) -> Layer:
        """Make a layer active, falling back to the first layer if id is unknown.

        Selecting a layer whose text has never been classified parses it.
        """
        layer = self.get(layer_id)
        if layer is None:
            layer = self._layers[0]
        self._selected_id = layer.id

        if layer.needs_parse:
            layer.reparse(self.parser)
        return layer

    def remove(self, layer_id: int) -> bool:
        """Remove a layer and its censor regions.

        Returns:
            True if removed; False if unknown id or it is the only layer
        """
        if len(self._layers) <= 1:
            logger.debug("Refusing to remove the last layer")
            return False

        index = self.index_of(layer_id)
        if index == -1:
            return False

        del self._layers[index]
        self.censor_store.remove_layer(layer_id)
        if self._selected_id == layer_id:
            self._selected_id = None

        logger.debug(f"Removed layer {layer_id}")
        return True

    def move_up(self, layer_id: int) -> bool:
        """Swap with the previous layer; no-op at the top."""
        index = self.index_of(layer_id)
        if index <= 0:
            return False
        self._layers[index - 1], self._layers[index] = self._layers[index], self._layers[index - 1]
        return True

    def move_down(self, layer_id: int) -> bool:
        """Swap with the next layer; no-op at the bottom."""
        index = self.index_of(layer_id)
        if index == -1 or index >= len(self._layers) - 1:
            return False
        self._layers[index + 1], self._layers[index] = self._layers[index], self._layers[index + 1]
        return True

    # ========================================
    # Active Layer
    # ========================================

    @property
    def selected_id(self) -> Optional[int]:
        return self._selected_id

    @property
    def active_layer(self) -> Layer:
        """Selected layer, or the first layer if none is selected."""
        if self._selected_id is not None:
            layer = self.get(self._selected_id)
            if layer is not None:
                return layer
        return self._layers[0]

    # ========================================
    # Bulk Operations
    # ========================================

    def reparse_all(self) -> None:
        """Re-classify every layer (parse options changed)."""
        for layer in self._layers:
            layer.reparse(self.parser)

    def reset(self) -> None:
        """Drop all layers and start over with one default layer.

        Ids keep counting upward so stale references never resolve.
        """
        for layer in self._layers:
            self.censor_store.remove_layer(layer.id)
        self._layers = []
        self._selected_id = None
        self.create()

    def restore(self, layers: List[Layer], selected_id: Optional[int] = None) -> None:
        """Replace contents with restored layers (snapshot load)."""
        if not layers:
            raise ValueError("Cannot restore an empty layer list")
        self._layers = list(layers)
        self._next_id = max(self._next_id, max(layer.id for layer in layers) + 1)
        self._selected_id = None
        if selected_id is not None and self.get(selected_id) is not None:
            self._selected_id = selected_id
