"""Core application for the maternal health records service.

Models, serializers, services, views and route registrations for mothers,
doctors, clinics, medical records and risk prediction.
"""
