"""IPC reporting portal core.

Infection-rate aggregation, hand-hygiene compliance, notifiable-disease
census, and the report submission/validation workflow that feeds them.
"""

__version__ = "0.1.0"
