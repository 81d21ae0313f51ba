"""Database models"""
from jobboard.models.user import User, UserRole
from jobboard.models.company import Company
from jobboard.models.session_record import SessionRecord
from jobboard.models.skill import Skill, job_skills
from jobboard.models.job import Job, JobStatus
from jobboard.models.application import Application, ApplicationStatus

__all__ = [
    "User",
    "UserRole",
    "Company",
    "SessionRecord",
    "Skill",
    "job_skills",
    "Job",
    "JobStatus",
    "Application",
    "ApplicationStatus",
]
