"""
Services Layer

Pure tournament-progression logic that:
- Accepts domain inputs (IDs and an explicit Session)
- Returns domain outputs (models, dataclasses, counts)
- Does NOT depend on HTTP request/response objects
- Raises ValidationError / NotFoundError before any write
"""
