"""Local diagnostic sink for the shipper's own failures.

Never routed through CloudWatch, so a broken shipper cannot log to itself.
"""
import sys


def log(*a): print(*a, file=sys.stderr, flush=True)
