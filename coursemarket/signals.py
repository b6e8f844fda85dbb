from blinker import Namespace

_signals = Namespace()

# Sent after an enrollment transitions to completed and the transition is committed.
# Receivers get the enrollment as sender and the triggering ``actor`` as keyword.
course_completed = _signals.signal("course-completed")
