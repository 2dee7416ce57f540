# backend/mentorship/services/__init__.py
"""
Service layer for the mentorship scheduling service.

Business rules live here; services own transactions and talk to the
database only through repositories.
"""
