"""
Cart Uplift learning worker

Batch jobs that learn product similarity, product performance and
behavioral profiles from storefront interaction events, plus the
per-order recommendation attribution step.
"""

__version__ = "1.0.0"
