import datetime

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache

from scheduling.models import Appointment, Doctor, Patient, UserProfile

DAY = datetime.date(2026, 3, 2)


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle counters and the doctor list live in the default cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def doctor(db):
    return Doctor.objects.create(full_name='Dr. House', email='house@clinic.local', specialty='Diagnostics')


@pytest.fixture
def other_doctor(db):
    return Doctor.objects.create(full_name='Dr. Wilson', email='wilson@clinic.local', specialty='Oncology')


@pytest.fixture
def patient(db):
    return Patient.objects.create(first_name='John', last_name='Smith', phone='555-123-4567')


@pytest.fixture
def nurse_user(db):
    user = get_user_model().objects.create_user(username='nurse1', password='P@ssw0rd1')
    UserProfile.objects.create(user=user, full_name='Maria Ivanova', position='nurse')
    return user


@pytest.fixture
def doctor_user(db, doctor):
    user = get_user_model().objects.create_user(username='doctor1', password='P@ssw0rd1')
    UserProfile.objects.create(user=user, full_name=doctor.full_name, position='doctor', doctor=doctor)
    return user


@pytest.fixture
def make_appointment(patient):
    def _make(doctor, time, status=Appointment.STATUS_SCHEDULED, on_date=DAY):
        return Appointment.objects.create(
            patient=patient,
            doctor=doctor,
            appointment_date=on_date,
            appointment_time=time,
            complaint='headache',
            status=status,
        )
    return _make
