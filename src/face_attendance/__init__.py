"""Face Attendance package.

Organised by feature modules (students, attendance, matching) with a thin
Flask controller layer over service/repository layers.
"""
