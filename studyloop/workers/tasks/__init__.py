"""
Celery task modules.
"""
