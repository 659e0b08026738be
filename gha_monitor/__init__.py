"""GitHub Actions monitor.

Polls a single repository's workflow runs, jobs and steps and prints one line
per state transition, remembering how far it got between restarts.
"""

__version__ = "0.1.0"
