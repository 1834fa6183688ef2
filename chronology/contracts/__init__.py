"""
Contracts Module

This module defines the explicit interfaces and data transfer objects
that form the contracts between layers. All inter-layer communication
MUST use these contracts.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses)
2. Failures are values (Result / Error), never exceptions
3. Years are signed integers in astronomical numbering (1 BC == 0)
"""

from .base import ErrorCode, Error, Result, EventId, EventIdSequence, YearRange
from .events import (
    RecordRow, TimelineEvent, IngestionBatch, LayerLayout, DeletionOutcome,
    AuditEventType, AuditLogEntry, AUDIT_LOG_LIMIT,
)

__all__ = [
    'ErrorCode',
    'Error',
    'Result',
    'EventId',
    'EventIdSequence',
    'YearRange',
    'RecordRow',
    'TimelineEvent',
    'IngestionBatch',
    'LayerLayout',
    'DeletionOutcome',
    'AuditEventType',
    'AuditLogEntry',
    'AUDIT_LOG_LIMIT',
]
