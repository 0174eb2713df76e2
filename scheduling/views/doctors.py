from django.core.cache import cache
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from scheduling.models import Doctor
from scheduling.permissions import HasProfile
from scheduling.services.dashboard import format_doctor
from scheduling.signals import DOCTORS_CACHE_KEY

DOCTORS_CACHE_TTL = 300


def doctor_list() -> list[dict]:
    data = cache.get(DOCTORS_CACHE_KEY)
    if data is None:
        data = [format_doctor(d) for d in Doctor.objects.order_by('full_name')]
        cache.set(DOCTORS_CACHE_KEY, data, DOCTORS_CACHE_TTL)
    return data


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasProfile])
def list_doctors(request):
    """Return every doctor ordered by name, for the dashboard filters and booking form."""
    data = doctor_list()
    return Response({'ok': True, 'count': len(data), 'data': data})
