"""
Homely - household maintenance tracking.

Recurring task templates, the event lifecycle and subscription plan quotas.
"""

__version__ = "0.1.0"
