"""Domain services and storage collaborators.

``game`` and ``accounts`` hold pure decision logic with no Flask or database
imports; ``stores`` and ``accounts.auth`` apply those decisions through
Flask-SQLAlchemy and Flask-Login.
"""
