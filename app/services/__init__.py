"""Services package — all business logic lives here, never in routers.

Files:
  lifecycle.py     — Property status transitions + append-only lifecycle log (pure)
  risk.py          — Risk Gate: flag / critical classification, action gates, suspension dates (pure)
  access.py        — Actor checks raising 401 / 403
  audit.py         — Best-effort audit recorder (own session, after commit)
  verification.py  — OpenAI-backed document / identity / face verification oracle
  property.py      — Enrollment, deal workflow, locks, risk signals
  user.py          — Registration, standing, KYC, admin stats
  disputes.py      — Complaint filing and resolution

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
