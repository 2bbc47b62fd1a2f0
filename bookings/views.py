import json
import logging
from datetime import date

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from venue.models import PriceSettings
from .models import Booking, InvalidTransition
from .nepali_calendar import convert
from .pricing import PLAYZONE, PLAYZONE_PACKAGES, SKATEPARK, SKATEPARK_PACKAGES, compute_price
from .reports import PERIODS, dashboard_stats, derive_view, game_counts, revenue_summary
from .tokens import next_token_number

logger = logging.getLogger(__name__)


def _booking_payload(booking):
    return {
        'booking_id': booking.id,
        'token_number': booking.token_number,
        'customer_name': booking.customer_name,
        'phone_number': booking.phone_number,
        'gender': booking.gender,
        'age': booking.age,
        'address': booking.address,
        'number_of_persons': booking.number_of_persons,
        'date_english': booking.date_english.isoformat(),
        'date_nepali': booking.date_nepali,
        'date_nepali_exact': booking.date_nepali_exact,
        'game_type': booking.game_type,
        'playzone_package': booking.playzone_package or None,
        'skatepark_base_package': booking.skatepark_base_package or None,
        'skatepark_extra_hours': booking.skatepark_extra_hours,
        'package': booking.package_description(),
        'price': f'{booking.price:.2f}',
        'currency': settings.DEFAULT_CURRENCY,
        'status': booking.status,
        'start_time': booking.start_time.isoformat() if booking.start_time else None,
        'end_time': booking.end_time.isoformat() if booking.end_time else None,
        'actual_duration_minutes': booking.actual_duration_minutes,
        'created_at': booking.created_at.isoformat() if booking.created_at else None,
    }


def _parse_date(value):
    if not value:
        return timezone.localdate()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _parse_int(value, default, minimum):
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        raise ValueError(f"expected a whole number, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"expected a whole number, got {value!r}")
        value = int(value)
    number = int(value)
    if number < minimum:
        raise ValueError(f"must be >= {minimum}")
    return number


def _selection(data):
    """Split a payload into ``(game_type, package, extra_hours)``."""
    game_type = data.get('game_type') or ''
    if game_type == PLAYZONE:
        return game_type, data.get('playzone_package') or None, 0
    if game_type == SKATEPARK:
        extra_hours = _parse_int(data.get('skatepark_extra_hours'), 0, 0)
        return game_type, data.get('skatepark_base_package') or None, extra_hours
    return game_type, None, 0


@csrf_exempt
@require_http_methods(["GET", "POST"])
def bookings(request):
    if request.method == 'POST':
        return create_booking(request)
    return list_bookings(request)


def create_booking(request):
    try:
        data = json.loads(request.body)
    except json.JSONDecodeError:
        return JsonResponse({'error': 'Invalid JSON'}, status=400)

    customer_name = data.get('customer_name')
    game_type = data.get('game_type')

    if any(not v for v in [customer_name, game_type]):
        return JsonResponse({
            'error': 'Missing required fields: customer_name, game_type'
        }, status=400)

    if game_type not in (PLAYZONE, SKATEPARK):
        return JsonResponse({'error': f'Unknown game_type: {game_type}'}, status=400)

    try:
        game_type, package, extra_hours = _selection(data)
        number_of_persons = _parse_int(data.get('number_of_persons'), 1, 1)
        age = _parse_int(data.get('age'), None, 1)
        date_english = _parse_date(data.get('date_english'))
    except (TypeError, ValueError) as e:
        return JsonResponse({'error': f'Invalid field: {str(e)}'}, status=400)

    allowed = PLAYZONE_PACKAGES if game_type == PLAYZONE else SKATEPARK_PACKAGES
    if package not in allowed:
        return JsonResponse({
            'error': f'{game_type} package must be one of: {", ".join(allowed)}'
        }, status=400)

    gender = data.get('gender') or ''
    if gender and gender not in dict(Booking.GENDER_CHOICES):
        return JsonResponse({'error': f'Unknown gender: {gender}'}, status=400)

    price = compute_price(game_type, package, extra_hours, number_of_persons, PriceSettings.current_table())
    nepali = convert(date_english)

    with transaction.atomic():
        token_number = next_token_number()
        booking = Booking.objects.create(
            token_number=token_number,
            customer_name=customer_name,
            phone_number=data.get('phone_number') or '',
            gender=gender,
            age=age,
            address=data.get('address') or '',
            number_of_persons=number_of_persons,
            date_english=date_english,
            date_nepali=nepali.label,
            date_nepali_exact=nepali.exact,
            game_type=game_type,
            playzone_package=package if game_type == PLAYZONE else '',
            skatepark_base_package=package if game_type == SKATEPARK else '',
            skatepark_extra_hours=extra_hours if game_type == SKATEPARK else None,
            price=price,
            status=Booking.PENDING,
        )

    logger.info("Created booking %s with token %s (%s)", booking.id, token_number, price)
    return JsonResponse(_booking_payload(booking), status=201)


def list_bookings(request):
    params = request.GET
    try:
        booking_date = date.fromisoformat(params['date']) if params.get('date') else None
    except ValueError:
        return JsonResponse({'error': 'date must be YYYY-MM-DD'}, status=400)

    view = derive_view(
        Booking.objects.all(),
        date=booking_date,
        status=params.get('status', 'all'),
        game_type=params.get('game_type', 'all'),
        search=params.get('search', ''),
        token=params.get('token', ''),
    )
    return JsonResponse({
        'count': len(view),
        'bookings': [_booking_payload(b) for b in view],
    })


@csrf_exempt
@require_http_methods(["GET", "DELETE"])
def booking_detail(request, booking_id):
    try:
        booking = Booking.objects.get(id=booking_id)
    except Booking.DoesNotExist:
        return JsonResponse({'error': 'Booking not found'}, status=404)

    if request.method == 'DELETE':
        booking.delete()
        logger.info("Deleted booking %s (token %s)", booking_id, booking.token_number)
        return JsonResponse({'message': 'Booking deleted', 'booking_id': booking_id})

    return JsonResponse(_booking_payload(booking))


def _transition(booking_id, action):
    try:
        booking = Booking.objects.get(id=booking_id)
    except Booking.DoesNotExist:
        return JsonResponse({'error': 'Booking not found'}, status=404)

    try:
        getattr(booking, action)()
    except InvalidTransition as e:
        return JsonResponse({'error': str(e), 'status': booking.status}, status=409)

    logger.info("Booking %s (token %s) is now %s", booking.id, booking.token_number, booking.status)
    return JsonResponse(_booking_payload(booking))


@csrf_exempt
@require_http_methods(["POST"])
def confirm_booking(request, booking_id):
    return _transition(booking_id, 'confirm')


@csrf_exempt
@require_http_methods(["POST"])
def complete_booking(request, booking_id):
    return _transition(booking_id, 'complete')


@csrf_exempt
@require_http_methods(["POST"])
def auto_approve(request):
    with transaction.atomic():
        approved = Booking.objects.filter(status=Booking.PENDING).update(
            status=Booking.CONFIRMED,
            updated_at=timezone.now(),
        )

    logger.info("Auto-approved %s pending bookings", approved)
    if not approved:
        return JsonResponse({'approved': 0, 'message': 'No pending bookings to auto-approve'})
    return JsonResponse({'approved': approved, 'message': f'Approved {approved} pending bookings'})


@require_http_methods(["GET"])
def quote(request):
    params = request.GET
    try:
        game_type, package, extra_hours = _selection(params)
        number_of_persons = _parse_int(params.get('number_of_persons'), 1, 1)
        booking_date = _parse_date(params.get('date_english'))
        nepali = convert(booking_date)
    except (TypeError, ValueError) as e:
        return JsonResponse({'error': f'Invalid field: {str(e)}'}, status=400)

    price = compute_price(game_type, package, extra_hours, number_of_persons, PriceSettings.current_table())
    return JsonResponse({
        'price': f'{price:.2f}',
        'currency': settings.DEFAULT_CURRENCY,
        'date_english': booking_date.isoformat(),
        'date_nepali': nepali.label,
        'date_nepali_exact': nepali.exact,
    })


@require_http_methods(["GET"])
def customer_history(request):
    term = request.GET.get('q', '').strip()
    if not term:
        return JsonResponse({'count': 0, 'bookings': []})

    history = Booking.objects.filter(Q(customer_name=term) | Q(phone_number=term)).distinct()
    return JsonResponse({
        'count': len(history),
        'bookings': [_booking_payload(b) for b in history],
    })


@require_http_methods(["GET"])
def stats(request):
    try:
        day = _parse_date(request.GET.get('date'))
    except ValueError:
        return JsonResponse({'error': 'date must be YYYY-MM-DD'}, status=400)

    summary = dashboard_stats(Booking.objects.filter(date_english=day))
    summary['date'] = day.isoformat()
    summary['revenue'] = str(summary['revenue'])
    return JsonResponse(summary)


@require_http_methods(["GET"])
def revenue_report(request):
    period = request.GET.get('period', 'daily')
    if period not in PERIODS:
        return JsonResponse({'error': f'period must be one of: {", ".join(PERIODS)}'}, status=400)

    total = revenue_summary(Booking.objects.filter(status=Booking.COMPLETED), period)
    return JsonResponse({'period': period, 'revenue': f'{total:.2f}'})


@require_http_methods(["GET"])
def games_report(request):
    return JsonResponse({'games': game_counts(Booking.objects.all())})
