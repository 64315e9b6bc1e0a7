"""
Adaptive Learning Engine.

Pure computational core of the learning portal:
- adaptive: ability estimation and next-item selection for adaptive tests
- review: SM-2 flashcard scheduling and due-set resolution
- analysis: weak-area reports from historical mistakes

All engine functions take their data as arguments and return new values;
persistence and presentation belong to the caller.
"""

__version__ = "1.0.0"
