from clickloop.recording.session import RecordingSession

__all__ = ["RecordingSession"]
