"""
Core app - Shared building blocks for every other app.

Provides:
- Uniform success/failure response envelopes (responses.py)
- Typed API errors and the NinjaAPI exception handlers (errors.py)
- Upload handling on top of Django's storage API (storage_service.py)
"""
