"""
PDF Generator package for the Daily Editorial PDF Generator
Sanitizes, classifies, paginates and renders problem analyses
"""

from .models import ProblemMetadata, RenderRequest
from .pdf_creator import PDFCreator

__all__ = ['PDFCreator', 'ProblemMetadata', 'RenderRequest']
