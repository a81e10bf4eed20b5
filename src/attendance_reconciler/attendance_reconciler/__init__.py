"""Attendance Reconciler package.

Turns raw biometric punch events into one daily attendance record per
employee. Organized by feature modules (punches, hours, attendance,
reconciliation, devices) with repository/service layers and a thin Flask
controller on top.
"""
