"""Academic records coordination core.

This package is organized by feature modules (tokens, schedules, attendance,
notifications) with a thin Flask controller layer over service/repository
layers. The services only see repository protocols, so tests run against
in-memory fakes.
"""
