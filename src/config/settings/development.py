"""
Development settings for Course Authoring Service
"""

from .base import *

DEBUG = True
CORS_ALLOW_ALL_ORIGINS = True

LOGGING['loggers']['apps']['level'] = 'DEBUG'
