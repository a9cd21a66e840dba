"""
FaceWatch Auto Lock

Locks the workstation when the user has been idle and the webcam no longer
sees a face. Pauses itself while the session is locked.
"""

__version__ = "1.0.0"
__author__ = "FaceWatch Team"
__description__ = "Presence-aware workstation auto-lock using idle time and face detection"
