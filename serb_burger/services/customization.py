"""
Product Customization Rules

Every ingredient attached to a product is described by one
``IngredientOption``. Options are grouped by ingredient type and each group
gets a single policy:

    single    at most one selection in the group; picking another option
              replaces the current one
    multiple  independent toggles, capped by the smallest maxQuantity of
              the group's options (unbounded when none is set)
    required  the group must hold at least one selection; a required single
              group therefore always holds exactly one

The ``Customizer`` drives an interactive selection (storefront preview) and
``Customizer.check_selection`` validates a submitted one (order creation).
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from serb_burger.core.errors import ValidationFailed
from serb_burger.models import IngredientType, ProductIngredient, SelectionType
from serb_burger.services.pricing import unit_price

logger = logging.getLogger(__name__)


TYPE_LABELS = {
    IngredientType.BUN: "Булочка",
    IngredientType.PATTY: "Котлета",
    IngredientType.CHEESE: "Сыр",
    IngredientType.VEGETABLE: "Овощи",
    IngredientType.VEGGIE: "Овощи",
    IngredientType.SAUCE: "Соусы",
    IngredientType.ADDON: "Добавки",
}


class SelectionError(ValidationFailed):
    """A selection breaks the product's ingredient rules."""


@dataclass(frozen=True)
class IngredientOption:
    ingredient_id: int
    name: str
    price: float
    type: IngredientType
    selection_type: SelectionType = SelectionType.MULTIPLE
    is_required: bool = False
    max_quantity: Optional[int] = None
    sort_order: int = 0

    @classmethod
    def from_link(cls, link: ProductIngredient) -> "IngredientOption":
        ingredient = link.ingredient
        return cls(
            ingredient_id=ingredient.id,
            name=ingredient.name,
            price=ingredient.price,
            type=ingredient.type,
            selection_type=link.selection_type,
            is_required=link.is_required,
            max_quantity=link.max_quantity,
            sort_order=link.sort_order,
        )

    def snapshot(self) -> dict:
        """Frozen representation stored with order items."""
        return {"id": self.ingredient_id, "name": self.name, "price": self.price}


@dataclass
class OptionGroup:
    type: IngredientType
    options: list[IngredientOption] = field(default_factory=list)

    @property
    def label(self) -> str:
        return TYPE_LABELS.get(self.type, self.type.value)

    @property
    def is_single(self) -> bool:
        return any(o.selection_type == SelectionType.SINGLE for o in self.options)

    @property
    def is_required(self) -> bool:
        return any(o.is_required for o in self.options)

    @property
    def cap(self) -> Optional[int]:
        if self.is_single:
            return 1
        caps = [o.max_quantity for o in self.options if o.max_quantity]
        return min(caps) if caps else None

    def ids(self) -> set[int]:
        return {o.ingredient_id for o in self.options}


class Customizer:
    """
    Selection state for one product.

    Example:
        >>> c = Customizer(350, options)
        >>> c.toggle(bacon_id)
        True
        >>> c.price
        410.0
    """

    def __init__(self, base_price: float, options: Iterable[IngredientOption]):
        self.base_price = base_price
        self.options = sorted(options, key=lambda o: (o.sort_order, o.ingredient_id))
        self._by_id = {o.ingredient_id: o for o in self.options}

        self.groups: dict[IngredientType, OptionGroup] = {}
        for option in self.options:
            self.groups.setdefault(option.type, OptionGroup(option.type)).options.append(option)

        self._selected: set[int] = set(self.default_selection())

    @classmethod
    def for_product(cls, product) -> "Customizer":
        return cls(product.price, [IngredientOption.from_link(l) for l in product.ingredient_links])

    # -------------------------------------------------------------------------
    # Interactive selection
    # -------------------------------------------------------------------------

    def default_selection(self) -> list[int]:
        """Required options, pre-selected; one per required single group."""
        selected = []
        for group in self.groups.values():
            required = [o for o in group.options if o.is_required]
            if not required:
                continue
            if group.is_single:
                selected.append(required[0].ingredient_id)
            else:
                cap = group.cap or len(required)
                selected.extend(o.ingredient_id for o in required[:cap])
        return selected

    @property
    def selected_ids(self) -> list[int]:
        return [o.ingredient_id for o in self.options if o.ingredient_id in self._selected]

    @property
    def selected_options(self) -> list[IngredientOption]:
        return [self._by_id[i] for i in self.selected_ids]

    @property
    def price(self) -> float:
        return unit_price(self.base_price, (o.price for o in self.selected_options))

    def is_selected(self, ingredient_id: int) -> bool:
        return ingredient_id in self._selected

    def toggle(self, ingredient_id: int) -> bool:
        """
        Flip one option.

        Returns:
            True if the selection changed, False when the request was
            ignored (deselecting the last choice of a required group).

        Raises:
            SelectionError: unknown ingredient or group limit reached
        """
        option = self._option(ingredient_id)
        group = self.groups[option.type]
        chosen = self._selected & group.ids()

        if ingredient_id in self._selected:
            if group.is_required and len(chosen) == 1:
                logger.debug(f"Kept required {group.type.value} selection {ingredient_id}")
                return False
            self._selected.discard(ingredient_id)
            return True

        if group.is_single:
            self._selected -= chosen
        elif group.cap is not None and len(chosen) >= group.cap:
            raise SelectionError(f"Можно выбрать не более {group.cap}: {group.label}")

        self._selected.add(ingredient_id)
        return True

    # -------------------------------------------------------------------------
    # Validation of submitted selections
    # -------------------------------------------------------------------------

    def check_selection(self, ingredient_ids: Iterable[int]) -> list[IngredientOption]:
        """
        Validate a complete selection against the product's rules.

        Returns:
            The selected options in display order.
        """
        ids = list(ingredient_ids)
        if len(ids) != len(set(ids)):
            raise SelectionError("Ингредиент выбран несколько раз")

        chosen = set()
        for ingredient_id in ids:
            chosen.add(self._option(ingredient_id).ingredient_id)

        for group in self.groups.values():
            count = len(chosen & group.ids())
            if group.is_single and count > 1:
                raise SelectionError(f"Можно выбрать только один вариант: {group.label}")
            if group.cap is not None and count > group.cap:
                raise SelectionError(f"Можно выбрать не более {group.cap}: {group.label}")
            if group.is_required and count == 0:
                raise SelectionError(f"Необходимо выбрать: {group.label}")

        return [o for o in self.options if o.ingredient_id in chosen]

    def _option(self, ingredient_id: int) -> IngredientOption:
        try:
            return self._by_id[ingredient_id]
        except KeyError:
            raise SelectionError(
                f"Ингредиент {ingredient_id} недоступен для этого продукта"
            ) from None
