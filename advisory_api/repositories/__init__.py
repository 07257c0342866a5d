"""Repositories — every SQLAlchemy query lives here, never in services or routers."""
