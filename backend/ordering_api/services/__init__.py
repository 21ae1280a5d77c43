"""
Service layer: domain services and view builders.
"""
