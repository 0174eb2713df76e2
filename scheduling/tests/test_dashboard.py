import datetime

from scheduling.models import Appointment, Doctor, Patient
from scheduling.services.dashboard import (
    filter_appointments,
    format_appointment,
    mask_phone,
    organize_queue,
)

DAY = datetime.date(2026, 3, 2)

HOUSE = Doctor(full_name='Dr. House')
WILSON = Doctor(full_name='Dr. Wilson')


def _appt(doctor, hh, mm, status=Appointment.STATUS_SCHEDULED, first='John', last='Smith', on_date=DAY):
    return Appointment(
        doctor=doctor,
        patient=Patient(first_name=first, last_name=last, phone='555-123-4567'),
        appointment_date=on_date,
        appointment_time=datetime.time(hh, mm),
        status=status,
    )


def test_cancelled_rows_leave_the_active_list():
    active = _appt(HOUSE, 9, 0)
    cancelled = _appt(HOUSE, 10, 0, status=Appointment.STATUS_CANCELLED)

    assert filter_appointments([active, cancelled]) == [active]
    assert filter_appointments([active, cancelled], include_cancelled=True) == [active, cancelled]


def test_doctor_filter_treats_all_as_no_filter():
    a, b = _appt(HOUSE, 9, 0), _appt(WILSON, 9, 0)

    assert filter_appointments([a, b], doctor_id='all') == [a, b]
    assert filter_appointments([a, b], doctor_id='') == [a, b]
    assert filter_appointments([a, b], doctor_id=str(WILSON.id)) == [b]


def test_date_filter():
    today, tomorrow = _appt(HOUSE, 9, 0), _appt(HOUSE, 9, 0, on_date=DAY + datetime.timedelta(days=1))
    assert filter_appointments([today, tomorrow], on_date=DAY) == [today]


def test_search_matches_full_patient_name_or_doctor():
    a = _appt(HOUSE, 9, 0, first='Lisa', last='Cuddy')
    b = _appt(WILSON, 9, 0, first='Greg', last='Stone')

    assert filter_appointments([a, b], query='lisa cud') == [a]
    assert filter_appointments([a, b], query='WILSON') == [b]
    assert filter_appointments([a, b], query='nobody') == []


def test_queue_only_first_waiting_is_startable():
    first, second = _appt(HOUSE, 9, 0), _appt(HOUSE, 9, 30)
    done = _appt(HOUSE, 8, 0, status=Appointment.STATUS_COMPLETED)

    queue = organize_queue([done, first, second], preview=5)

    assert queue['current'] is None
    assert queue['next'] == [first, second]
    assert queue['startable_id'] == first.id
    assert queue['waiting_count'] == 2
    assert queue['completed_count'] == 1


def test_queue_nothing_startable_while_in_consultation():
    current = _appt(HOUSE, 9, 0, status=Appointment.STATUS_IN_CONSULTATION)
    waiting = _appt(HOUSE, 9, 30)

    queue = organize_queue([current, waiting], preview=5)

    assert queue['current'] is current
    assert queue['startable_id'] is None


def test_queue_preview_is_capped():
    waiting = [_appt(HOUSE, 9 + i, 0) for i in range(7)]
    queue = organize_queue(waiting, preview=5)
    assert len(queue['next']) == 5
    assert queue['waiting_count'] == 7


def test_mask_phone():
    assert mask_phone('555-123-4567') == '***-***-4567'
    assert mask_phone('12') == '12'
    assert mask_phone('') == ''


def test_format_appointment_masks_when_asked():
    data = format_appointment(_appt(HOUSE, 9, 5), masked=True)
    assert data['time'] == '09:05'
    assert data['statusLabel'] == 'Scheduled'
    assert data['patient']['phone'] == '***-***-4567'
    assert data['doctor']['fullName'] == 'Dr. House'
