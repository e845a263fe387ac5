"""Pydantic schemas package.

Folder intent:
  common.py     — CamelModel base + HealthResponse + status metadata (all schemas inherit CamelModel)
  records.py    — Versioned JSON records (lifecycle entries, interested tenants, risk signals)
  user.py       — User request DTOs / responses, KYC payloads
  property.py   — Property enrollment, status commands, risk signals, PropertyOut
  complaint.py  — Complaints, resolution, audit log and dashboard stats
"""
