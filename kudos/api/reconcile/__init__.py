"""Reconciliation webhook resource."""
