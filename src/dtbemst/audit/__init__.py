"""Audit logging and run manifest subsystem for dtbemst.

Main Components
---------------
- RunContext: High-level context manager for pipeline runs
- AuditLogger: JSONL event logger
- ManifestWriter: Run manifest builder
"""

from dtbemst.audit.context import RunContext
from dtbemst.audit.helpers import generate_run_id
from dtbemst.audit.logger import AuditLogger
from dtbemst.audit.manifest import ManifestWriter
from dtbemst.audit.validation import validate_run_outputs

__all__ = [
    "RunContext",
    "AuditLogger",
    "ManifestWriter",
    "generate_run_id",
    "validate_run_outputs",
]
