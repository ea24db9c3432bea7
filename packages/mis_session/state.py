from enum import Enum


class Direction(str, Enum):
    """
    Requested navigation direction.
    TIMEOUT is the forced transition issued when a section timer expires.
    """
    FORWARD = "FORWARD"
    BACKWARD = "BACKWARD"
    TIMEOUT = "TIMEOUT"


class NavigationOutcome(str, Enum):
    MOVED = "MOVED"                          # Same section, different question
    SECTION_CHANGED = "SECTION_CHANGED"      # Cursor entered another section
    AT_FIRST_QUESTION = "AT_FIRST_QUESTION"  # Backward refused, cursor unchanged
    COMPLETED = "COMPLETED"                  # Terminal state reached, route to submission


class SessionEvent(str, Enum):
    """
    Events emitted by the Session Engine.
    """
    SESSION_OPENED = "SESSION_OPENED"
    SECTION_CHANGED = "SECTION_CHANGED"      # Trigger "Section Complete" / "Moving back" notice
    SECTION_TIME_UP = "SECTION_TIME_UP"      # Forced advance due to section time limit
    BOUNDARY_REACHED = "BOUNDARY_REACHED"    # "Already at the first question"
    SESSION_COMPLETED = "SESSION_COMPLETED"
    SUBMISSION_FAILED = "SUBMISSION_FAILED"
    SESSION_SUBMITTED = "SESSION_SUBMITTED"


class BootstrapAction(str, Enum):
    """
    What the caller must do after bootstrapping a session reference.
    """
    CREATED = "CREATED"            # New session, continue under its concrete id
    RESUMED = "RESUMED"            # Persisted snapshot restored
    SHOW_RESULTS = "SHOW_RESULTS"  # Result already exists, redirect to results
