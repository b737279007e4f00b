"""
Rate limiting and error handling decorators for API endpoints
"""
from functools import wraps
from django.core.exceptions import PermissionDenied
from django.http import Http404, JsonResponse
from django_ratelimit import ALL
from django_ratelimit.decorators import ratelimit
import logging

logger = logging.getLogger(__name__)


def api_ratelimit(key='ip', rate='30/m', method=ALL):
    """
    Rate limiting for API endpoints

    Args:
        key: Grouping key (ip, user, user_or_ip, header:x-real-ip)
        rate: Limit as <count>/<period>, e.g. '10/m', '100/h', '1000/d'
        method: HTTP method or list of methods to limit, ALL by default

    Limited requests get a JSON 429 response instead of the Ratelimited exception.
    """
    def decorator(func):
        # one counter per view
        group = f'{func.__module__}.{func.__qualname__}'

        @wraps(func)
        @ratelimit(group=group, key=key, rate=rate, method=method, block=False)
        def wrapper(request, *args, **kwargs):
            if getattr(request, 'limited', False):
                logger.warning(
                    f"Rate limit exceeded for {func.__name__}: "
                    f"key={key}, rate={rate}, "
                    f"ip={request.META.get('REMOTE_ADDR')}"
                )

                return JsonResponse({
                    'success': False,
                    'error': 'rate_limit_exceeded',
                    'message': 'Too many requests. Please wait a moment.'
                }, status=429)

            return func(request, *args, **kwargs)

        return wrapper
    return decorator


def api_data_ratelimit(rate='60/m'):
    """Read endpoints, 60 requests a minute by default"""
    return api_ratelimit(key='user_or_ip', rate=rate, method='GET')


def booking_ratelimit(rate='10/m'):
    """Booking initiation and coupon checks, 10 requests a minute by default"""
    return api_ratelimit(key='ip', rate=rate, method='POST')


def payment_ratelimit(rate='20/m'):
    """Payment intent endpoints"""
    return api_ratelimit(key='ip', rate=rate, method='POST')


def json_server_errors(func):
    """
    Unexpected errors become a logged JSON 500 response.
    Http404 and PermissionDenied keep Django's own handling.
    """
    @wraps(func)
    def wrapper(request, *args, **kwargs):
        try:
            return func(request, *args, **kwargs)
        except (Http404, PermissionDenied):
            raise
        except Exception as e:
            logger.error(f"Error in {func.__name__}: {str(e)}", exc_info=True)
            return JsonResponse({'success': False, 'error': 'Internal server error'}, status=500)

    return wrapper
