"""
Task manager services - repository, session state and API boundary
"""
