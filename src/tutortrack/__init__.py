"""TutorTrack package.

Single-tenant tutoring attendance tracker. Organized by feature modules
(attendance, reports, students, users) with a thin Flask controller layer
over service/repository layers.
"""
