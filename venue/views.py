import json
import logging

from django.db import transaction
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from .models import PriceSettings, StaffMember
from .serializers import PriceSettingsSerializer, StaffMemberSerializer, StaffMemberUpdateSerializer

logger = logging.getLogger(__name__)


def _load_json(request):
    try:
        return json.loads(request.body), None
    except json.JSONDecodeError:
        return None, JsonResponse({'error': 'Invalid JSON'}, status=400)


@csrf_exempt
@require_http_methods(["GET", "PUT", "POST"])
def prices(request):
    """Read or replace the five unit prices."""
    if request.method == 'GET':
        return JsonResponse(PriceSettingsSerializer(PriceSettings.load()).data)

    data, error = _load_json(request)
    if error:
        return error

    with transaction.atomic():
        serializer = PriceSettingsSerializer(PriceSettings.load(), data=data)
        if not serializer.is_valid():
            return JsonResponse({'error': 'Invalid prices', 'fields': serializer.errors}, status=400)
        serializer.save()

    logger.info("Price settings updated: %s", dict(serializer.data))
    return JsonResponse({'message': 'Game prices saved', 'prices': serializer.data})


@csrf_exempt
@require_http_methods(["GET", "POST"])
def staff(request):
    if request.method == 'GET':
        members = StaffMember.objects.all()
        return JsonResponse({'staff': StaffMemberSerializer(members, many=True).data})

    data, error = _load_json(request)
    if error:
        return error

    serializer = StaffMemberSerializer(data=data)
    if not serializer.is_valid():
        return JsonResponse({'error': 'Invalid staff member', 'fields': serializer.errors}, status=400)
    member = serializer.save()

    logger.info("Added staff member %s as %s", member.email, member.role)
    return JsonResponse(serializer.data, status=201)


@csrf_exempt
@require_http_methods(["POST", "PATCH", "DELETE"])
def staff_detail(request, staff_id):
    try:
        member = StaffMember.objects.get(id=staff_id)
    except StaffMember.DoesNotExist:
        return JsonResponse({'error': 'Staff member not found'}, status=404)

    if request.method == 'DELETE':
        member.delete()
        logger.info("Removed staff member %s", member.email)
        return JsonResponse({'message': 'Staff member deleted', 'staff_id': staff_id})

    data, error = _load_json(request)
    if error:
        return error

    serializer = StaffMemberUpdateSerializer(member, data=data, partial=True)
    if not serializer.is_valid():
        return JsonResponse({'error': 'Invalid staff member', 'fields': serializer.errors}, status=400)
    serializer.save()

    logger.info("Updated staff member %s (%s)", member.email, member.role)
    return JsonResponse(serializer.data)
