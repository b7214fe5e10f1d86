"""Application services layer (state store, auth, composition).

Services coordinate domain models and infrastructure adapters. They should
avoid UI concerns.
"""
