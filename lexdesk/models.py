from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Enum, Float, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from lexdesk.database import Base
import enum
import uuid

# =====================================================
# ENUMS
# =====================================================

class UserRole(str, enum.Enum):
    ADMIN = "admin"
    LAWYER = "lawyer"
    CLIENT = "client"

class CaseStatus(str, enum.Enum):
    PENDING = "Pending"
    ON_TRIAL = "On-Trial"
    COMPLETED = "Completed"
    DISMISSED = "Dismissed"

class InvoiceStatus(str, enum.Enum):
    PAID = "Paid"
    PARTIALLY_PAID = "Partially Paid"
    UNPAID = "Unpaid"
    OVERDUE = "Overdue"

class InvoiceClientStatus(str, enum.Enum):
    VIEWED = "Viewed"
    NOT_VIEWED = "Not Viewed"

class ServiceCategory(str, enum.Enum):
    CONSULTATION = "Consultation"
    LITIGATION = "Litigation"
    DOCUMENTATION = "Documentation"
    OTHER = "Other"

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    RESCHEDULED = "Rescheduled"

class TeamMemberRole(str, enum.Enum):
    ADMIN = "Admin"
    ATTORNEY = "Attorney"
    PARALEGAL = "Paralegal"
    ASSISTANT = "Assistant"
    OTHER = "Other"

class TeamMemberStatus(str, enum.Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "On Leave"

class TaskStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

class TaskPriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

class RecipientKind(str, enum.Enum):
    USER = "User"
    CLIENT = "Client"

class NotificationType(str, enum.Enum):
    CASE = "case"
    APPOINTMENT = "appointment"
    TASK = "task"
    SYSTEM = "system"

class ReferenceModel(str, enum.Enum):
    CASE = "Case"
    APPOINTMENT = "Appointment"
    TASK = "Task"


def new_id() -> str:
    return str(uuid.uuid4())

# =====================================================
# USERS & CLIENTS
# =====================================================

class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, index=True)
    phone = Column(String(20))
    client_id = Column(String(36), ForeignKey("clients.id"), index=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    client = relationship("Client", foreign_keys=[client_id])

class Client(Base):
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    mobile = Column(String(20))
    address = Column(Text)
    company = Column(String(255))
    notes = Column(Text)
    status = Column(Boolean, default=True, nullable=False, index=True)
    created_by = Column(
        String(36),
        ForeignKey("users.id", use_alter=True, name="fk_clients_created_by_users"),
    )
    created_at = Column(DateTime, default=func.now(), index=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    creator = relationship("User", foreign_keys=[created_by])
    cases = relationship("Case", back_populates="client")

# =====================================================
# CASE MANAGEMENT
# =====================================================

class Case(Base):
    __tablename__ = "cases"

    id = Column(String(36), primary_key=True, default=new_id)
    client_no = Column(String(100), unique=True, nullable=False, index=True)
    client_name = Column(String(255), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id"), index=True)
    case_type = Column(String(255), nullable=False, index=True)
    court = Column(String(255), nullable=False)
    court_no = Column(String(100))
    magistrate = Column(String(255))
    petitioner = Column(String(255), nullable=False)
    respondent = Column(String(255), nullable=False)
    next_date = Column(DateTime, index=True)
    status = Column(Enum(CaseStatus), default=CaseStatus.PENDING, nullable=False, index=True)
    is_important = Column(Boolean, default=False, nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)
    assigned_to = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=func.now(), index=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    client = relationship("Client", back_populates="cases")
    assignee = relationship("User", foreign_keys=[assigned_to])
    creator = relationship("User", foreign_keys=[created_by])
    documents = relationship(
        "CaseDocument", back_populates="case",
        cascade="all, delete-orphan", order_by="CaseDocument.uploaded_at",
    )
    timeline = relationship(
        "CaseTimelineEntry", back_populates="case",
        cascade="all, delete-orphan", order_by="CaseTimelineEntry.date",
    )
    notes = relationship(
        "CaseNote", back_populates="case",
        cascade="all, delete-orphan", order_by="CaseNote.created_at",
    )

class CaseDocument(Base):
    __tablename__ = "case_documents"

    id = Column(String(36), primary_key=True, default=new_id)
    case_id = Column(String(36), ForeignKey("cases.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    file_url = Column(String(500), nullable=False)
    uploaded_at = Column(DateTime, default=func.now(), index=True)
    uploaded_by = Column(String(36), ForeignKey("users.id"), nullable=False)

    # Relationships
    case = relationship("Case", back_populates="documents")
    uploader = relationship("User", foreign_keys=[uploaded_by])

class CaseTimelineEntry(Base):
    __tablename__ = "case_timeline_entries"

    id = Column(String(36), primary_key=True, default=new_id)
    case_id = Column(String(36), ForeignKey("cases.id"), nullable=False, index=True)
    date = Column(DateTime, nullable=False, index=True)
    description = Column(Text, nullable=False)
    added_by = Column(String(36), ForeignKey("users.id"), nullable=False)

    # Relationships
    case = relationship("Case", back_populates="timeline")
    author = relationship("User", foreign_keys=[added_by])

class CaseNote(Base):
    __tablename__ = "case_notes"

    id = Column(String(36), primary_key=True, default=new_id)
    case_id = Column(String(36), ForeignKey("cases.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=func.now())
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)

    # Relationships
    case = relationship("Case", back_populates="notes")
    author = relationship("User", foreign_keys=[created_by])

# =====================================================
# BILLING
# =====================================================

class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), unique=True, nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(Enum(ServiceCategory), nullable=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True, default=new_id)
    invoice_no = Column(String(50), unique=True, nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    client_name = Column(String(255), nullable=False)
    issue_date = Column(DateTime, nullable=False, default=func.now(), index=True)
    due_date = Column(DateTime, nullable=False)
    subtotal = Column(Float, nullable=False)
    tax_rate = Column(Float, default=0)
    tax_amount = Column(Float, default=0)
    total = Column(Float, nullable=False)
    paid = Column(Float, default=0, nullable=False)
    status = Column(Enum(InvoiceStatus), default=InvoiceStatus.UNPAID, nullable=False, index=True)
    client_status = Column(Enum(InvoiceClientStatus), default=InvoiceClientStatus.NOT_VIEWED, nullable=False)
    notes = Column(Text)
    created_by = Column(String(36), ForeignKey("users.id"))
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    client = relationship("Client")
    creator = relationship("User", foreign_keys=[created_by])
    items = relationship(
        "InvoiceItem", back_populates="invoice",
        cascade="all, delete-orphan", order_by="InvoiceItem.position",
    )

    @property
    def balance_due(self) -> float:
        # Not clamped: overpayment yields a negative balance
        return (self.total or 0) - (self.paid or 0)

class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(String(36), primary_key=True, default=new_id)
    invoice_id = Column(String(36), ForeignKey("invoices.id"), nullable=False, index=True)
    service_id = Column(String(36), ForeignKey("services.id", ondelete="SET NULL"))
    position = Column(Integer, default=0, nullable=False)
    description = Column(String(255), nullable=False)
    quantity = Column(Float, nullable=False)
    rate = Column(Float, nullable=False)
    amount = Column(Float, nullable=False)

    # Relationships
    invoice = relationship("Invoice", back_populates="items")
    service = relationship("Service")

# =====================================================
# SCHEDULING & WORK
# =====================================================

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    date_time = Column(DateTime, nullable=False, index=True)
    duration = Column(Integer, default=60, nullable=False)  # minutes
    location = Column(String(255), default="")
    description = Column(Text, default="")
    status = Column(Enum(AppointmentStatus), default=AppointmentStatus.SCHEDULED, nullable=False, index=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    client = relationship("Client")
    creator = relationship("User", foreign_keys=[created_by])

class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="")
    due_date = Column(DateTime, nullable=False, index=True)
    start_date = Column(DateTime, default=func.now())
    status = Column(Enum(TaskStatus), default=TaskStatus.PENDING, nullable=False)
    priority = Column(Enum(TaskPriority), default=TaskPriority.MEDIUM, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    related_to = Column(JSON)  # {"name": ..., "case_number": ...}
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    owner = relationship("User")

class TeamMember(Base):
    __tablename__ = "team_members"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    position = Column(String(255), nullable=False)
    role = Column(Enum(TeamMemberRole), nullable=False, index=True)
    phone_number = Column(String(20))
    date_joined = Column(DateTime, default=func.now())
    profile_image_url = Column(String(500))
    status = Column(Enum(TeamMemberStatus), default=TeamMemberStatus.ACTIVE, nullable=False)
    specializations = Column(JSON, default=list)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

# =====================================================
# NOTIFICATIONS
# =====================================================

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=new_id)
    recipient_id = Column(String(36), nullable=False, index=True)
    recipient_kind = Column(Enum(RecipientKind), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(Enum(NotificationType), nullable=False)
    is_read = Column(Boolean, default=False, nullable=False, index=True)
    reference_model = Column(Enum(ReferenceModel))
    reference_id = Column(String(36))
    created_at = Column(DateTime, default=func.now(), index=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    @property
    def reference(self):
        if self.reference_model is None or self.reference_id is None:
            return None
        return {"kind": self.reference_model.value, "id": self.reference_id}
