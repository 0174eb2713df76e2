"""
Appointment endpoints used by the nurse dashboard.

Nurses list, create, edit and cancel appointments and can ask the
messaging webhook to offer a patient a new slot.  The status change
endpoint is shared with doctors, whose rights are narrowed by
:mod:`scheduling.services.status`.
"""
from __future__ import annotations

import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from scheduling.exceptions import (
    NotificationError,
    TimeConflictError,
    TransitionNotAllowed,
    WebhookNotConfigured,
)
from scheduling.models import Appointment, Doctor, Patient
from scheduling.permissions import HasProfile, IsNurse
from scheduling.serializers.appointment import (
    AppointmentCreateSerializer,
    AppointmentIdSerializer,
    AppointmentListQuerySerializer,
    AppointmentUpdateSerializer,
    StatusUpdateSerializer,
)
from scheduling.services import appointments as svc
from scheduling.services.audit import log_action
from scheduling.services.dashboard import filter_appointments, format_appointment
from scheduling.services.notify import request_reschedule

logger = logging.getLogger(__name__)


def _error(exc, http_status):
    return Response({'ok': False, 'code': getattr(exc, 'code', 'error'), 'detail': str(exc)}, status=http_status)


def _not_found(what: str):
    return Response({'ok': False, 'code': 'not_found', 'detail': f'{what} not found'}, status=status.HTTP_404_NOT_FOUND)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsNurse])
def list_appointments(request):
    """Return the nurse's active appointment list for one day.

    Query params:
      - doctorId: doctor UUID, or ``all``/empty for every doctor
      - date: ``YYYY-MM-DD``, defaults to today
      - q: search in patient or doctor name
      - includeCancelled: 1 to keep cancelled appointments in the list
    """
    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    on_date = q.validated_data.get('date') or timezone.localdate()
    fetched = svc.visible_appointments(request.user).filter(appointment_date=on_date).order_by(
        'appointment_date', 'appointment_time'
    )
    filtered = filter_appointments(
        fetched,
        doctor_id=q.validated_data.get('doctorId'),
        on_date=on_date,
        query=q.validated_data.get('q'),
        include_cancelled=q.validated_data.get('includeCancelled', False),
    )
    return Response({
        'ok': True,
        'date': on_date.isoformat(),
        'count': len(filtered),
        'data': [format_appointment(a) for a in filtered],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasProfile])
def appointment_detail(request):
    q = AppointmentIdSerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    appointment = svc.visible_appointments(request.user).filter(id=q.validated_data['id']).first()
    if not appointment:
        return _not_found('appointment')
    return Response({'ok': True, 'data': format_appointment(appointment)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsNurse])
def create_appointment(request):
    s = AppointmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        appointment = svc.create_appointment(
            request.user,
            doctor_id=vd['doctorId'],
            appointment_date=vd['date'],
            appointment_time=vd['time'],
            complaint=vd['complaint'],
            patient_id=vd.get('patientId'),
            new_patient=s.new_patient_kwargs(),
            telegram_id=vd.get('telegramId'),
        )
    except TimeConflictError as e:
        return _error(e, status.HTTP_400_BAD_REQUEST)
    except Doctor.DoesNotExist:
        return _not_found('doctor')
    except Patient.DoesNotExist:
        return _not_found('patient')
    return Response({'ok': True, 'data': format_appointment(appointment)}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsNurse])
def update_appointment(request):
    s = AppointmentUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        appointment = svc.update_appointment(
            request.user,
            vd['id'],
            doctor_id=vd['doctorId'],
            appointment_date=vd['date'],
            appointment_time=vd['time'],
            status=vd['status'],
            complaint=vd.get('complaint'),
        )
    except (TimeConflictError, TransitionNotAllowed) as e:
        return _error(e, status.HTTP_400_BAD_REQUEST)
    except Appointment.DoesNotExist:
        return _not_found('appointment')
    except Doctor.DoesNotExist:
        return _not_found('doctor')
    return Response({'ok': True, 'data': format_appointment(appointment)})


def _apply_status(request, action, appointment_id, **kwargs):
    try:
        appointment = action(request.user, appointment_id, **kwargs)
    except TransitionNotAllowed as e:
        return _error(e, status.HTTP_400_BAD_REQUEST)
    except Appointment.DoesNotExist:
        return _not_found('appointment')
    return Response({'ok': True, 'newStatus': appointment.status, 'data': format_appointment(appointment)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasProfile])
def update_status(request):
    """Change an appointment's status within the caller's allowed transitions."""
    s = StatusUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return _apply_status(
        request, svc.change_status, s.validated_data['id'],
        new_status=s.validated_data['status'], reason=s.validated_data.get('reason') or '',
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsNurse])
def cancel_appointment(request):
    """Cancel an appointment.  The row stays in the store but leaves the active list."""
    s = AppointmentIdSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return _apply_status(request, svc.cancel_appointment, s.validated_data['id'])


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsNurse])
@throttle_classes([ScopedRateThrottle])
def request_reschedule_view(request):
    s = AppointmentIdSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = svc.visible_appointments(request.user).filter(id=s.validated_data['id']).first()
    if not appointment:
        return _not_found('appointment')
    try:
        payload = request_reschedule(appointment)
    except NotificationError as e:
        logger.error('reschedule request for %s failed: %s', appointment.pk, e)
        if isinstance(e, WebhookNotConfigured):
            http_status = status.HTTP_503_SERVICE_UNAVAILABLE
        else:
            http_status = status.HTTP_502_BAD_GATEWAY
        return Response({'ok': False, 'code': e.code, 'detail': 'Failed to send reschedule request'}, status=http_status)
    log_action(user=request.user, action='reschedule_request', object_type='appointment', object_id=appointment.id,
               detail=payload)
    return Response({'ok': True, 'detail': 'Reschedule request sent to patient via Telegram'})

request_reschedule_view.cls.throttle_scope = 'reschedule'
