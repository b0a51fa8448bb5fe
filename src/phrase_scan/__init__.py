"""phrase-scan - find a spoken phrase in audio recordings.

Transcribes audio with whisper.cpp and searches the transcripts for a target
phrase, tolerating the noise of automatic transcription: plural and
possessive endings, small misspellings and phrases split across segments.
"""

__version__ = "0.1.0"
