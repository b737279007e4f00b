"""
Helpers shared by the manager API views
"""
from django.forms.models import model_to_dict
from django.http import JsonResponse

from booking.utils import form_errors, first_error


def error_response(errors, status=400):
    """Validation failure in the shape the dashboard forms expect"""
    return JsonResponse({
        'success': False,
        'message': first_error(errors),
        'errors': errors,
    }, status=status)


def form_payload(instance, data, fields):
    """
    Current values of `instance` overlaid with the submitted `data`

    Lets update endpoints accept partial payloads while ModelForms still see
    every field. Related objects are reduced to primary keys.
    """
    payload = model_to_dict(instance, fields=fields)
    for key, value in payload.items():
        if isinstance(value, (list, tuple)) and value and hasattr(value[0], 'pk'):
            payload[key] = [obj.pk for obj in value]
    payload.update({key: value for key, value in data.items() if key in fields})
    return payload


def bind_form(form_class, data, instance=None, **form_kwargs):
    """ModelForm bound to the merged payload for a new or existing instance"""
    if instance is None:
        instance = form_class._meta.model()
    fields = list(form_class.base_fields)
    return form_class(form_payload(instance, data, fields), instance=instance, **form_kwargs)


def save_form(form_class, data, instance=None):
    """
    Validate and save

    Returns:
        (saved_instance, None) or (None, errors)
    """
    form = bind_form(form_class, data, instance)
    if not form.is_valid():
        return None, form_errors(form)
    return form.save(), None
