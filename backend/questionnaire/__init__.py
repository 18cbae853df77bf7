"""Application package for the study-abroad questionnaire backend.

This package exposes the validation, repository, service and API modules
used by the FastAPI application, plus the wizard and admin helpers that
talk to it over HTTP. Individual modules contain the concrete
implementations and documentation.
"""
