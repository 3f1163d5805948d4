"""Residency application: resident activity log, MIR simulator, shifts and reviews.

This package contains models, services, serializers, views and route
registrations for the API consumed by the mobile app.
"""
