"""Biometric attendance reconciliation package.

Organized by feature modules (matching, shifts, attendance, audit, ...)
with a thin Flask controller layer over service/repository layers.
"""
