"""Services package — all business logic lives here, never in routers.

Files:
  validator.py      — IGO / NIGO required-field check
  formatter.py      — Jira reply bodies
  dispatcher.py     — the Push workflow (Orion update + Jira reply)
  integrations/     — Orion and Jira clients behind LedgerClient / TicketClient
  templates.py      — the 16 reference agreement templates
  extractor.py      — pdfplumber + OpenAI classification and field extraction
  processor.py      — classify → extract → validate for one document
  documents.py      — document storage and lifecycle (used by the v1 router)
  pdf_generator.py  — synthetic agreements and reference templates (reportlab)

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
