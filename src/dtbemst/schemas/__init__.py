"""JSON schemas for run manifests and audit events."""
