"""
Patient views.

Nurses pick an existing patient or register a new one while booking.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from scheduling.models import Patient
from scheduling.permissions import HasProfile, IsNurse
from scheduling.serializers.patient import PatientCreateSerializer, patient_kwargs
from scheduling.services.appointments import create_patient as create_patient_record
from scheduling.services.dashboard import format_patient


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasProfile])
def list_patients(request):
    qs = Patient.objects.order_by('first_name', 'last_name')
    q = (request.query_params.get('q') or '').strip()
    if q:
        qs = qs.filter(first_name__icontains=q) | qs.filter(last_name__icontains=q) | qs.filter(phone__icontains=q)
    data = [format_patient(p) for p in qs]
    return Response({'ok': True, 'count': len(data), 'data': data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsNurse])
def create_patient(request):
    s = PatientCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = create_patient_record(request.user, **patient_kwargs(s.validated_data))
    return Response({'ok': True, 'data': format_patient(patient)}, status=status.HTTP_201_CREATED)
