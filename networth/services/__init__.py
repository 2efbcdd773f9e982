"""
Services package.

External collaborators of the engine: record providers, the session
store, and storage for goals and the audit trail.
"""
