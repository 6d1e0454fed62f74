"""Intake/metrics service: CRUD over the ``jrm`` and ``metrics`` tables.

The FastAPI application lives in :mod:`intake_api.main`.
"""
