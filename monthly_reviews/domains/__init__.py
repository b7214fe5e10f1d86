"""Domain layer (models, errors and the persistence port).

Domain modules should not depend on UI. Infrastructure access is injected
through the `ReviewBackend` protocol.
"""
