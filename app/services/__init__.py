from app.services.contact_service import ContactService
from app.services.message_service import MessageService
from app.services.mood_service import MoodService
from app.services.read_receipt_service import ReadReceiptService
from app.services.report_service import ReportService
from app.services.room_service import RoomService

__all__ = [
    "ContactService",
    "MessageService",
    "MoodService",
    "ReadReceiptService",
    "ReportService",
    "RoomService",
]
