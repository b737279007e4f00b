from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.core.exceptions import ValidationError

from booking.utils import (
    calculate_price, normalize_addon_selection, resolve_addons, validate_addon_selection, to_decimal,
)


def _option(price):
    return SimpleNamespace(price_adjustment=Decimal(price))


def test_price_with_addons_and_percentage_discount():
    addons = [(None, _option('50.00')), (None, _option('20.00'))]

    price = calculate_price(Decimal('200.00'), 2, addons, discount=('PERCENTAGE', Decimal('10')))

    assert price['subtotal'] == Decimal('400.00')
    assert price['addons_total'] == Decimal('140.00')
    assert price['total_subtotal'] == Decimal('540.00')
    assert price['discount_amount'] == Decimal('54.00')
    assert price['final_price'] == Decimal('486.00')


def test_fixed_discount_is_capped_at_subtotal():
    price = calculate_price(Decimal('30.00'), 1, discount=('FIXED_AMOUNT', Decimal('50.00')))

    assert price['discount_amount'] == Decimal('30.00')
    assert price['final_price'] == Decimal('0.00')


def test_no_participants_costs_nothing():
    price = calculate_price('200', 0, [(None, _option('50.00'))])

    assert price['total_subtotal'] == Decimal('0.00')
    assert price['final_price'] == Decimal('0.00')


def test_prices_are_rounded_to_cents():
    price = calculate_price('33.333', 3, discount=('PERCENTAGE', '15'))

    assert price['subtotal'] == Decimal('100.00')
    assert price['final_price'] == Decimal('85.00')


def test_to_decimal():
    assert to_decimal('12.5') == Decimal('12.5')
    assert to_decimal(None) == Decimal('0.00')
    assert to_decimal('', default=None) is None
    with pytest.raises(ValidationError):
        to_decimal('twelve')
    with pytest.raises(ValidationError):
        to_decimal('nan')
    with pytest.raises(ValidationError):
        to_decimal(float('inf'))


def test_normalize_addon_selection():
    selection = normalize_addon_selection({'3': 7, '4': ['8', 9], '5': None, '6': []})

    assert selection == {3: [7], 4: [8, 9]}
    assert normalize_addon_selection(None) == {}


def test_normalize_addon_selection_rejects_garbage():
    with pytest.raises(ValidationError):
        normalize_addon_selection(['not', 'a', 'dict'])
    with pytest.raises(ValidationError):
        normalize_addon_selection({'1': 'abc'})


@pytest.mark.django_db
def test_validate_addon_selection(addons):
    groups = [addons['lunch'], addons['extras']]

    ok, error = validate_addon_selection(
        {addons['lunch'].id: [addons['daily_lunch'].id],
         addons['extras'].id: [addons['shirt'].id, addons['paddle'].id]},
        groups,
    )
    assert ok and error is None

    ok, error = validate_addon_selection(
        {addons['lunch'].id: [addons['no_lunch'].id, addons['daily_lunch'].id]}, groups
    )
    assert not ok
    assert 'Only one option' in error

    ok, error = validate_addon_selection({addons['lunch'].id: [addons['shirt'].id]}, groups)
    assert not ok
    assert 'Unknown option' in error

    ok, error = validate_addon_selection({999999: [1]}, groups)
    assert not ok
    assert 'does not belong' in error


@pytest.mark.django_db
def test_resolve_addons_skips_unknown(addons):
    groups = [addons['lunch'], addons['extras']]

    resolved = resolve_addons(
        {addons['lunch'].id: [addons['daily_lunch'].id], addons['extras'].id: [999999], 424242: [1]},
        groups,
    )

    assert resolved == [(addons['lunch'], addons['daily_lunch'])]
