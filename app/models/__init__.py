from app.models.contact import Contact
from app.models.message import Message
from app.models.mood_checkin import MoodCheckin
from app.models.read_receipt import ReadReceipt
from app.models.report import Report
from app.models.room import Room

__all__ = [
    "Contact",
    "Message",
    "MoodCheckin",
    "ReadReceipt",
    "Report",
    "Room",
]
