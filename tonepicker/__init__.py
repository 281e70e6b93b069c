"""
Tone Picker - text tone rewriting core

Rewrites a block of text through a hosted language model according to a
point picked on a 3x3 formality/voice grid. Provides the request pipeline
(validation, admission, caching, backend call) and a linear undo/redo
history for the edited text.
"""

__version__ = "0.1.0"
__author__ = "Tone Picker Team"
