import html

import bleach
from rest_framework import serializers


def clean_text(v):
    """Drop markup from free text and keep `&`, `<` and `>` as typed."""
    return html.unescape(bleach.clean((v or '').strip(), tags=[], strip=True))


class PatientCreateSerializer(serializers.Serializer):
    firstName = serializers.CharField(max_length=100)
    lastName = serializers.CharField(max_length=100, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32)
    age = serializers.IntegerField(min_value=0, max_value=150, required=False, allow_null=True)
    telegramId = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)

    def validate_firstName(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('first name is required')
        return v

    def validate_lastName(self, v):
        return clean_text(v)

    def validate_phone(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('phone is required')
        return v


def patient_kwargs(vd) -> dict:
    """Map validated camelCase patient fields onto ``create_patient`` keywords."""
    return {
        'first_name': vd['firstName'],
        'last_name': vd.get('lastName') or '',
        'phone': vd['phone'],
        'age': vd.get('age'),
        'telegram_id': (vd.get('telegramId') or '').strip() or None,
    }
