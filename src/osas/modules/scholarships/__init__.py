"""
Scholarships module - Scholarship programs, courses and required forms.

A scholarship with no course links is open to every course.
"""

from osas.modules.scholarships.models import Course, Scholarship, ScholarshipForm, ScholarshipStatus

__all__ = ["Course", "Scholarship", "ScholarshipForm", "ScholarshipStatus"]
