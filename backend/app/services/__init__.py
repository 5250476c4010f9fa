"""
Services Layer

Pure business logic services that:
- Accept domain inputs (IDs, sessions, collaborators)
- Return domain outputs (models, dataclasses, dicts)
- Raise app.exceptions errors, never HTTPException
- Own their transaction boundary when they write
"""
