"""v1 router package — all /api/v1/* endpoints live here.

Files:
  users.py       — Registration, profile, ban / suspend / reactivate, KYC steps
  properties.py  — Enrollment, public listing, deal workflow, locks, fraud desk
  complaints.py  — Dispute filing and resolution
  admin.py       — Audit trail and dashboard counters
  meta.py        — Status metadata lookup

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to app/services/.
"""
