"""
DKA calculator audit API.

FastAPI service that runs clinical-episode submissions through the
DKA calculator, records an audit entry keyed by a fresh audit ID and
a peppered patient hash, and lets a clinician amend the outcome
fields once the resubmitted patient identity matches.
"""

__version__ = "0.1.0"
