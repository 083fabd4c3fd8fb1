from sqlalchemy import Column, String, Integer, Date, DateTime, Text, Boolean, ForeignKey, JSON
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone


def _utcnow():
    return datetime.now(timezone.utc)


Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(String(50), primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255))
    role = Column(String(20), nullable=False, default="Agent")
    created_at = Column(DateTime, default=_utcnow)


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(20), primary_key=True)
    name = Column(String(200), nullable=False)
    client = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default="On Track")
    due_date = Column(Date)
    event_type = Column(String(30))
    created_at = Column(DateTime, default=_utcnow)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(20), primary_key=True)
    title = Column(String(200), nullable=False)
    project_id = Column(String(20), ForeignKey("projects.id"))
    status = Column(String(20), nullable=False, default="To Do")
    due_date = Column(Date, nullable=False)
    created_by = Column(String(50))
    created_at = Column(DateTime, default=_utcnow)


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(String(20), primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    requester_id = Column(String(50), nullable=False)
    requester_type = Column(String(10), nullable=False, default="user")
    assignee_id = Column(String(50))
    status = Column(String(20), nullable=False, default="Open")
    priority = Column(String(20), nullable=False, default="Medium")
    created_at = Column(DateTime, default=_utcnow)
    closed_at = Column(DateTime)


class WarehouseRequest(Base):
    __tablename__ = "warehouse_requests"

    id = Column(String(20), primary_key=True)
    project_id = Column(String(20), ForeignKey("projects.id"), nullable=False)
    requester_id = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="Pending")
    request_date = Column(Date, nullable=False)
    required_by_date = Column(Date)
    items = Column(JSON, default=list)
    notes = Column(Text)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    message = Column(String(500), nullable=False)
    link = Column(String(200))
    read = Column(Boolean, default=False)
    created_at = Column(DateTime, default=_utcnow)
