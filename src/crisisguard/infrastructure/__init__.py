"""
CRISISGUARD Infrastructure Layer

Metrics and error tracking integrations. Business services only
increment metrics and report safety events through this layer.
"""
