from rest_framework import serializers

from scheduling.models import Appointment
from scheduling.serializers.patient import PatientCreateSerializer, clean_text, patient_kwargs

STATUS_VALUES = [s for s, _ in Appointment.STATUS_CHOICES]


class AppointmentListQuerySerializer(serializers.Serializer):
    doctorId = serializers.CharField(required=False, allow_blank=True)
    date = serializers.DateField(required=False)
    q = serializers.CharField(max_length=64, required=False, allow_blank=True)
    includeCancelled = serializers.BooleanField(required=False, default=False)

    def validate_doctorId(self, v):
        return (v or '').strip()


class AppointmentIdSerializer(serializers.Serializer):
    id = serializers.UUIDField()


class AppointmentCreateSerializer(serializers.Serializer):
    doctorId = serializers.UUIDField()
    date = serializers.DateField()
    time = serializers.TimeField()
    complaint = serializers.CharField(max_length=2000)
    patientId = serializers.UUIDField(required=False, allow_null=True)
    newPatient = PatientCreateSerializer(required=False, allow_null=True)
    telegramId = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)

    def validate_complaint(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('complaint is required')
        return v

    def validate(self, attrs):
        if not attrs.get('patientId') and not attrs.get('newPatient'):
            raise serializers.ValidationError({'patientId': 'select a patient or provide newPatient'})
        return attrs

    def new_patient_kwargs(self):
        raw = self.validated_data.get('newPatient')
        return patient_kwargs(raw) if raw else None


class AppointmentUpdateSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    doctorId = serializers.UUIDField()
    date = serializers.DateField()
    time = serializers.TimeField()
    status = serializers.ChoiceField(choices=STATUS_VALUES)
    complaint = serializers.CharField(max_length=2000, required=False, allow_blank=True)

    def validate_complaint(self, v):
        return clean_text(v)


class StatusUpdateSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=STATUS_VALUES)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class DoctorQueueQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
