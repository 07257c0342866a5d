"""Pydantic schemas package.

Folder intent:
  common.py        — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  advisory.py      — AdvisoryRecord, validation / analysis / push results, DocumentHandle
  document.py      — document and PDF-generation API schemas
  integrations.py  — Orion and Jira payloads
"""
