"""
URL mappings for the scheduling API.

Trailing slashes are omitted on every path; the dashboards call them
exactly as listed here.
"""
from django.urls import include, path

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view, me_view
from .views import appointments, doctor_queue, doctors, health, patients

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view),
    path('api/auth/logout', jwt_logout_view),
    path('api/auth/me', me_view),
    # Reference data
    path('api/doctors', doctors.list_doctors),
    path('api/patients', patients.list_patients),
    path('api/patients/create', patients.create_patient),
    # Nurse dashboard
    path('api/appointments', appointments.list_appointments),
    path('api/appointments/detail', appointments.appointment_detail),
    path('api/appointments/create', appointments.create_appointment),
    path('api/appointments/update', appointments.update_appointment),
    path('api/appointments/cancel', appointments.cancel_appointment),
    path('api/appointments/request-reschedule', appointments.request_reschedule_view),
    path('api/appointments/update-status', appointments.update_status),
    # Doctor dashboard
    path('api/doctor/queue', doctor_queue.doctor_queue),
    path('api/doctor/queue/start', doctor_queue.start_consultation),
    path('api/doctor/queue/complete', doctor_queue.complete_consultation),
    path('api/doctor/queue/no-show', doctor_queue.mark_no_show),
]
