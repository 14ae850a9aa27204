"""
fitlog: training and nutrition analytics.

Turns raw workout, body-weight and nutrition logs into dashboard metrics:
personal records, compliance, estimated 1RM, food swaps and leaderboards.
"""

__version__ = "0.3.0"
