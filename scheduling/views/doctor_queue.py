"""
Doctor dashboard views.

A doctor sees only their own appointments for one day, split into the
patient currently in consultation and the waiting queue.  Patient
phone numbers are masked on this screen.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from scheduling.exceptions import TransitionNotAllowed
from scheduling.models import Appointment
from scheduling.permissions import IsDoctor, get_profile
from scheduling.serializers.appointment import AppointmentIdSerializer, DoctorQueueQuerySerializer
from scheduling.services import appointments as svc
from scheduling.services.dashboard import format_appointment, format_doctor, organize_queue

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def doctor_queue(request):
    """Return today's queue (or ``?date=``) for the calling doctor.

    Only the first waiting appointment carries ``canStart: true``, and
    only while no consultation is in progress.
    """
    q = DoctorQueueQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    on_date = q.validated_data.get('date') or timezone.localdate()
    profile = get_profile(request.user)

    appointments = svc.visible_appointments(request.user).filter(appointment_date=on_date).order_by('appointment_time')
    queue = organize_queue(appointments)

    next_items = []
    for a in queue['next']:
        item = format_appointment(a, masked=True)
        item['canStart'] = a.id == queue['startable_id']
        next_items.append(item)

    return Response({
        'ok': True,
        'date': on_date.isoformat(),
        'doctor': format_doctor(profile.doctor),
        'current': format_appointment(queue['current'], masked=True) if queue['current'] else None,
        'next': next_items,
        'waitingCount': queue['waiting_count'],
        'completedCount': queue['completed_count'],
        'refreshInterval': settings.DOCTOR_QUEUE_REFRESH_SECONDS,
    })


def _queue_action(request, action):
    s = AppointmentIdSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        appointment = action(request.user, s.validated_data['id'])
    except TransitionNotAllowed as e:
        return Response({'ok': False, 'code': e.code, 'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except Appointment.DoesNotExist:
        return Response({'ok': False, 'code': 'not_found', 'detail': 'appointment not found'},
                        status=status.HTTP_404_NOT_FOUND)
    logger.info('doctor %s set appointment %s to %s', request.user.pk, appointment.pk, appointment.status)
    return Response({'ok': True, 'newStatus': appointment.status,
                     'data': format_appointment(appointment, masked=True)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctor])
def start_consultation(request):
    return _queue_action(request, svc.start_consultation)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctor])
def complete_consultation(request):
    return _queue_action(request, svc.complete_consultation)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctor])
def mark_no_show(request):
    return _queue_action(request, svc.mark_no_show)
