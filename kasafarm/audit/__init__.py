"""Audit logging package."""

from kasafarm.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
