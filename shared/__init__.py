"""
Shared configuration, logging, errors and transfer models
"""
