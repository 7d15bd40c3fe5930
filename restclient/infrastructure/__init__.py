"""
Transports, resilience policies and logging.
"""
