"""
Utilities for the booking module
"""
import json
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError

from catalog.constants import SELECTION_SINGLE
from .constants import CENTS, ZERO, DISCOUNT_PERCENTAGE


def to_decimal(value, default=ZERO):
    """Decimal from int/float/str, `default` for empty values"""
    if value in (None, ''):
        return default
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f'Invalid amount: {value}')
    if not result.is_finite():
        raise ValidationError(f'Invalid amount: {value}')
    return result


def normalize_addon_selection(selected_addons):
    """
    Normalize the add-on selection coming from JSON

    Args:
        selected_addons: {group_id: option_id | [option_id, ...]}, keys may be strings

    Returns:
        {group_id (int): [option_id (int), ...]}
    """
    if not selected_addons:
        return {}
    if not isinstance(selected_addons, dict):
        raise ValidationError('Add-ons must be an object of group id to option id(s)')

    normalized = {}
    for group_id, options in selected_addons.items():
        if options in (None, '', []):
            continue
        if not isinstance(options, list):
            options = [options]
        try:
            normalized[int(group_id)] = [int(option_id) for option_id in options]
        except (TypeError, ValueError):
            raise ValidationError(f'Invalid add-on selection for group {group_id}')
    return normalized


def resolve_addons(selected_addons, addon_groups):
    """
    Match a normalized selection against the camp's add-on groups

    Unknown groups and options are skipped.

    Returns:
        List of (group, option) pairs in selection order
    """
    groups = {group.id: group for group in addon_groups}
    resolved = []
    for group_id, option_ids in selected_addons.items():
        group = groups.get(group_id)
        if group is None:
            continue
        options = {option.id: option for option in group.options.all()}
        for option_id in option_ids:
            option = options.get(option_id)
            if option is not None:
                resolved.append((group, option))
    return resolved


def validate_addon_selection(selected_addons, addon_groups):
    """
    SINGLE-choice groups accept one option only

    Returns:
        (is_valid, error_message)
    """
    groups = {group.id: group for group in addon_groups}
    for group_id, option_ids in selected_addons.items():
        group = groups.get(group_id)
        if group is None:
            return False, f'Add-on group {group_id} does not belong to this camp'
        if group.selection_type == SELECTION_SINGLE and len(option_ids) > 1:
            return False, f'Only one option can be chosen for "{group.group_name}"'
        known = {option.id for option in group.options.all()}
        unknown = [option_id for option_id in option_ids if option_id not in known]
        if unknown:
            return False, f'Unknown option for "{group.group_name}"'
    return True, None


def calculate_price(session_price, participant_count, addons=(), discount=None):
    """
    Booking price breakdown

    Args:
        session_price: Price of one place in the session
        participant_count: Number of participants
        addons: Iterable of (group, option) pairs, each charged per participant
        discount: Optional (discount_type, discount_value)

    Returns:
        Dict with session_price, subtotal, addons_total, total_subtotal,
        discount_amount and final_price, all Decimals rounded to cents
    """
    session_price = to_decimal(session_price)
    participants = max(int(participant_count), 0)

    subtotal = session_price * participants
    addons_total = sum((option.price_adjustment * participants for _, option in addons), ZERO)
    total_subtotal = subtotal + addons_total

    discount_amount = ZERO
    if discount:
        discount_type, discount_value = discount
        discount_value = to_decimal(discount_value)
        if discount_type == DISCOUNT_PERCENTAGE:
            discount_amount = total_subtotal * discount_value / Decimal('100')
        else:
            discount_amount = discount_value
        discount_amount = min(max(discount_amount, ZERO), max(total_subtotal, ZERO))

    final_price = max(ZERO, total_subtotal - discount_amount)

    return {
        'session_price': session_price.quantize(CENTS),
        'subtotal': subtotal.quantize(CENTS),
        'addons_total': addons_total.quantize(CENTS),
        'total_subtotal': total_subtotal.quantize(CENTS),
        'discount_amount': discount_amount.quantize(CENTS),
        'final_price': final_price.quantize(CENTS),
    }


def price_to_json(price):
    return {key: float(value) for key, value in price.items()}


def json_body(request):
    """
    Decode a JSON request body

    Raises:
        ValidationError: body is not a JSON object
    """
    try:
        data = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError('Request body must be valid JSON')
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def form_errors(form):
    """Form errors as {field: [messages]}"""
    return {field: [str(error) for error in error_list] for field, error_list in form.errors.items()}


def first_error(errors, default='Validation failed'):
    for messages in errors.values():
        if messages:
            return messages[0]
    return default


def validation_message(error):
    """Readable text of a django ValidationError"""
    if hasattr(error, 'message_dict'):
        return first_error({k: list(v) for k, v in error.message_dict.items()})
    return ' '.join(error.messages)
