"""
CRISISGUARD - Crisis Signal Detection and Escalation

This package analyzes free-form support-chat text for self-harm and
danger-to-others risk, fuses independent risk signals into a single
assessment and drives the escalation workflow that summons a human
or emergency responder.

IMPORTANT: This is a safety-critical system. Every failure mode must
degrade toward "ask a human", never toward silence.
"""

__version__ = "0.1.0"
__author__ = "CRISISGUARD Engineering Team"
