"""School Scheduling package.

Organized by feature modules (shifts, assignments, timetables, ...) with a thin
Flask controller layer over service/repository layers. Persistence goes through
a generic record store port (see ``store``).
"""
