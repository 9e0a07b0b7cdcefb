"""
Services Package
"""
from examhall.services.exam_service import ExamService
from examhall.services.scoring_service import ScoringService
from examhall.services.report_service import ReportService

__all__ = ['ExamService', 'ScoringService', 'ReportService']
