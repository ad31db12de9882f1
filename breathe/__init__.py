"""
BreatheEasy guided breathing package


Modules:
- session: 4-7-8 phase state machine, one-second ticker, session controller
- voice: speech engines, voice selection, narration policy
- io: notifications, console rendering, interactive text loop
- offline: versioned asset cache and the request-intercepting cache worker
- web: JSON API over the session controller
"""

__version__ = "0.1.0"

# Keep package imports lightweight; speech and web backends pull in optional
# runtime dependencies (ElevenLabs, simpleaudio, FastAPI) at import time.
