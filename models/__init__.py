"""
Domain models - enums shared by the ORM entities and transfer models
"""
