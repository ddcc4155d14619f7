"""
Services Layer

Bracket logic that:
- Accepts domain inputs (ids, scores, Tournament snapshots)
- Returns domain outputs (entities, OperationResults)
- Does NOT depend on HTTP request/response objects
- Only touches storage through SnapshotStore
"""
