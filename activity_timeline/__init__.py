"""
activity_timeline — Archive Activity Timeline Generator
========================================================
Fetches daily "to-date" activity snapshots from the social media archive
API, joins them into one key × day matrix and emits the curve-scaled
dataset consumed by the timeline frontend.
"""

__version__ = "1.0.0"
