"""
tests/test_customization.py – grouping, toggling and validation of
ingredient selections.
"""
import pytest

from conftest import option
from serb_burger.models import IngredientType, SelectionType
from serb_burger.services.customization import Customizer, OptionGroup, SelectionError

BUN, PATTY, CHEESE, ADDON, SAUCE = (
    IngredientType.BUN, IngredientType.PATTY, IngredientType.CHEESE,
    IngredientType.ADDON, IngredientType.SAUCE,
)
SINGLE, MULTIPLE = SelectionType.SINGLE, SelectionType.MULTIPLE


@pytest.fixture
def options():
    return [
        option(1, BUN, name="Булочка классическая", selection_type=SINGLE, is_required=True, sort_order=0),
        option(2, BUN, name="Бриошь", price=50, selection_type=SINGLE, sort_order=1),
        option(3, PATTY, name="Говяжья котлета", selection_type=SINGLE, is_required=True, sort_order=2),
        option(4, PATTY, name="Двойная котлета", price=150, selection_type=SINGLE, sort_order=3),
        option(5, CHEESE, name="Чеддер", price=30, max_quantity=2, sort_order=4),
        option(6, CHEESE, name="Дорблю", price=50, max_quantity=2, sort_order=5),
        option(7, CHEESE, name="Моцарелла", price=40, max_quantity=3, sort_order=6),
        option(8, ADDON, name="Бекон", price=60, sort_order=7),
        option(9, SAUCE, name="Кетчуп", sort_order=8),
    ]


@pytest.fixture
def customizer(options):
    return Customizer(350, options)


# ── Groups ─────────────────────────────────────────────────────────────────────

class TestGroups:
    def test_grouped_by_type(self, customizer):
        assert set(customizer.groups) == {BUN, PATTY, CHEESE, ADDON, SAUCE}
        assert customizer.groups[BUN].ids() == {1, 2}

    def test_single_if_any_option_single(self):
        group = OptionGroup(CHEESE, [option(1, CHEESE), option(2, CHEESE, selection_type=SINGLE)])
        assert group.is_single
        assert group.cap == 1

    def test_required_if_any_option_required(self, customizer):
        assert customizer.groups[BUN].is_required
        assert not customizer.groups[ADDON].is_required

    def test_cap_is_smallest_max_quantity(self, customizer):
        assert customizer.groups[CHEESE].cap == 2

    def test_unbounded_without_max_quantity(self, customizer):
        assert customizer.groups[ADDON].cap is None

    def test_label(self, customizer):
        assert customizer.groups[BUN].label == "Булочка"


# ── Interactive selection ─────────────────────────────────────────────────────

class TestDefaults:
    def test_required_singles_preselected(self, customizer):
        assert customizer.selected_ids == [1, 3]
        assert customizer.price == 350

    def test_required_multiple_all_selected(self):
        c = Customizer(100, [
            option(1, SAUCE, is_required=True),
            option(2, SAUCE, is_required=True),
            option(3, SAUCE),
        ])
        assert c.selected_ids == [1, 2]

    def test_no_options(self):
        c = Customizer(350, [])
        assert c.selected_ids == []
        assert c.price == 350


class TestToggle:
    def test_select_addon_adds_price(self, customizer):
        assert customizer.toggle(8) is True
        assert customizer.price == 410

    def test_deselect_addon(self, customizer):
        customizer.toggle(8)
        assert customizer.toggle(8) is True
        assert not customizer.is_selected(8)
        assert customizer.price == 350

    def test_single_group_replaces_choice(self, customizer):
        customizer.toggle(2)
        assert customizer.is_selected(2)
        assert not customizer.is_selected(1)
        assert customizer.price == 400

    def test_required_single_keeps_last_choice(self, customizer):
        assert customizer.toggle(1) is False
        assert customizer.is_selected(1)

    def test_required_single_always_holds_one(self, customizer):
        for ingredient_id in (2, 2, 1, 1, 2):
            customizer.toggle(ingredient_id)
            chosen = [i for i in customizer.selected_ids if i in (1, 2)]
            assert len(chosen) == 1

    def test_optional_single_can_be_cleared(self):
        c = Customizer(100, [option(1, CHEESE, selection_type=SINGLE)])
        c.toggle(1)
        assert c.toggle(1) is True
        assert c.selected_ids == []

    def test_cap_enforced(self, customizer):
        customizer.toggle(5)
        customizer.toggle(6)
        with pytest.raises(SelectionError, match="не более 2"):
            customizer.toggle(7)
        assert customizer.selected_ids == [1, 3, 5, 6]

    def test_unknown_ingredient(self, customizer):
        with pytest.raises(SelectionError):
            customizer.toggle(99)


# ── Validation ─────────────────────────────────────────────────────────────────

class TestCheckSelection:
    def test_valid_selection_in_display_order(self, customizer):
        chosen = customizer.check_selection([8, 3, 1])
        assert [o.ingredient_id for o in chosen] == [1, 3, 8]

    def test_missing_required(self, customizer):
        with pytest.raises(SelectionError, match="Необходимо выбрать: Котлета"):
            customizer.check_selection([1])

    def test_two_in_single_group(self, customizer):
        with pytest.raises(SelectionError, match="только один"):
            customizer.check_selection([1, 2, 3])

    def test_over_cap(self, customizer):
        with pytest.raises(SelectionError, match="не более 2"):
            customizer.check_selection([1, 3, 5, 6, 7])

    def test_duplicates(self, customizer):
        with pytest.raises(SelectionError):
            customizer.check_selection([1, 3, 8, 8])

    def test_not_linked(self, customizer):
        with pytest.raises(SelectionError, match="недоступен"):
            customizer.check_selection([1, 3, 42])

    def test_empty_selection_without_required_groups(self):
        c = Customizer(120, [option(1)])
        assert c.check_selection([]) == []

    def test_selection_error_is_validation_error(self, customizer):
        with pytest.raises(SelectionError) as exc_info:
            customizer.check_selection([])
        assert exc_info.value.status_code == 400
