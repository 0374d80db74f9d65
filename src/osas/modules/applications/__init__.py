"""
Applications Module

Handles the scholarship application workflow:
1. Submission with document upload (one file per required form)
2. Staff review: approve, decline or reopen
3. Status notification emails to the student
4. Yearly dashboard statistics

API Endpoints:
- POST /student/apply - Submit an application
- GET /student/applications - The student's own applications
- GET /admin/applications - Staff listing with status filter and search
- PUT /admin/applications - Change an application's status
- GET /admin/dashboard - Yearly statistics

Rules:
- A student holds at most one pending or approved application; a partial
  unique index backs the check against concurrent submissions
- Files stored for a submission are removed if the submission fails
"""

from osas.modules.applications.models import Application, ApplicationForm, ApplicationStatus

__all__ = ["Application", "ApplicationForm", "ApplicationStatus"]
