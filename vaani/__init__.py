"""
VAANI - Hindi-first voice assistant backend

Canned or model-generated replies to transcribed speech, plus a flat
reminder list scanned once per minute.
"""

__version__ = "0.1.0"
