"""Utility functions for audit logging and request parsing"""
import logging
import math
from datetime import datetime
from decimal import Decimal, InvalidOperation

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, rapaport_upload, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., product code)
        object_reference: Reference identifier (e.g., batch number)
    """
    if not action or not model_name or object_id is None:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    audit_user = user
    if audit_user is None and request is not None:
        audit_user = getattr(request, 'user', None)

    try:
        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=get_client_ip(request) if request else None,
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def to_decimal(value, default=Decimal('0')):
    """
    Convert user input to Decimal.

    None, empty strings, NaN, infinities and unparseable values become `default`.
    """
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return default
        return Decimal(str(value))
    try:
        result = Decimal(str(value).strip().replace(',', '.'))
    except (InvalidOperation, ValueError):
        return default
    return result if result.is_finite() else default


def parse_bool(value, default=False):
    """Parse query/form booleans like 'true', '1', 'yes'"""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def parse_date(value):
    """Parse a YYYY-MM-DD query value; empty values give None, bad ones raise ValueError"""
    if not value:
        return None
    return datetime.strptime(value.strip(), '%Y-%m-%d').date()


def paginated_response(request, queryset, serializer_class, default_limit=50, context=None):
    """
    Page through a queryset with ?page=&limit= the way list endpoints expect.

    Returns the serialized page with count/next/previous metadata.
    """
    from django.core.paginator import Paginator
    from rest_framework.response import Response

    try:
        page = max(int(request.query_params.get('page', 1)), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = min(max(int(request.query_params.get('limit', default_limit)), 1), 500)
    except (TypeError, ValueError):
        limit = default_limit

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)

    serializer = serializer_class(page_obj, many=True, context=context or {})
    return Response({
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    })
