"""
Routes Package
Exports all route blueprints
"""
from examhall.routes.auth import auth_bp
from examhall.routes.exams import exams_bp
from examhall.routes.school import school_bp

__all__ = ['auth_bp', 'exams_bp', 'school_bp']
