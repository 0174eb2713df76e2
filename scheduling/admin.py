"""
Django admin registrations for the scheduling models.

Lets staff inspect bookings and fix profile links through ``/admin/``.
"""

from django.contrib import admin

from .models import (
    Appointment,
    AppointmentTransition,
    AuditEvent,
    Doctor,
    Patient,
    UserProfile,
)


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'specialty', 'email', 'created_at')
    search_fields = ('full_name', 'email', 'specialty')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'phone', 'age', 'telegram_id', 'created_at')
    search_fields = ('first_name', 'last_name', 'phone')


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'full_name', 'position', 'doctor')
    list_filter = ('position',)
    search_fields = ('user__username', 'full_name')


class AppointmentTransitionInline(admin.TabularInline):
    model = AppointmentTransition
    extra = 0
    readonly_fields = ('from_status', 'to_status', 'operator', 'timestamp', 'reason')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('appointment_date', 'appointment_time', 'doctor', 'patient', 'status')
    list_filter = ('status', 'doctor', 'appointment_date')
    search_fields = ('patient__first_name', 'patient__last_name', 'doctor__full_name')
    inlines = [AppointmentTransitionInline]


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'user', 'action', 'object_type', 'object_id')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id',)
