"""
Model signal handlers.

Every insert, update or delete of an appointment is pushed to the
``appointments`` channel group, and doctor edits drop the cached doctor
list.
"""
from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Appointment, Doctor
from .services.realtime import DELETE, INSERT, UPDATE, broadcast_appointment_change

DOCTORS_CACHE_KEY = "doctors:all"


@receiver(post_save, sender=Appointment)
def appointment_saved(sender, instance, created, **kwargs):
    broadcast_appointment_change(instance, INSERT if created else UPDATE)


@receiver(post_delete, sender=Appointment)
def appointment_deleted(sender, instance, **kwargs):
    broadcast_appointment_change(instance, DELETE)


@receiver(post_save, sender=Doctor)
@receiver(post_delete, sender=Doctor)
def doctor_changed(sender, instance, **kwargs):
    cache.delete(DOCTORS_CACHE_KEY)
