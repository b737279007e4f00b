from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.http import require_GET


@require_GET
def health(request):
    return JsonResponse({
        'success': True,
        'status': 'ok',
        'currency': settings.BOOKING_CURRENCY,
        'payments_configured': bool(settings.STRIPE_SECRET_KEY),
    })
