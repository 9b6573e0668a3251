"""ORM models for the registrar store."""

from registrar_kernel.models.course import Course
from registrar_kernel.models.department import Department
from registrar_kernel.models.enrollment import Enrollment
from registrar_kernel.models.student import Student

__all__ = [
    "Course",
    "Department",
    "Enrollment",
    "Student",
]
