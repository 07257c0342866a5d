"""v1 router package — all /api/v1/* endpoints live here.

Files:
  documents.py  — upload, analyze, push, view and delete advisory agreements
  generator.py  — synthetic agreement / reference template generation

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to advisory_api/services/.
"""
