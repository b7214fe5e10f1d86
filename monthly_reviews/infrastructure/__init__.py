"""Infrastructure layer (storage adapters and HTTP clients).

Everything that touches disk or the network lives here, behind the
`ReviewBackend` protocol defined in the domain layer.
"""
