"""Timekeeping package.

Self-service attendance ledger (one time-in/time-out record per user per day)
and idle-session auto-termination, organized by feature modules with thin
Flask/CLI surfaces over service/repository layers.
"""
