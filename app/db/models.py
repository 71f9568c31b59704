"""
Database Models for the Parked Domain Tracker

This module defines the SQLModel database schema for:
- Visitor: One row per logged request to a parked domain

Design Decisions:
- Column names match VisitorRecord field names one to one
- timestamp is stored as the ISO-8601 string captured at classification time;
  the fixed-width UTC format sorts lexicographically in time order
- Booleans are stored as 0/1 integers so rows read back identically on
  SQLite and PostgreSQL
- Indexes on timestamp (ordering) and domain (admin filter)
- No uniqueness constraints and no foreign keys: every visit is its own row
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Integer, String, Text
from sqlmodel import Column, Field, SQLModel

if TYPE_CHECKING:
    from app.services.classifier import VisitorRecord


class Visitor(SQLModel, table=True):
    """
    Visitor log table.

    Fields mirror VisitorRecord. Optional fields are NULL when the request
    did not carry the corresponding signal.
    """
    __tablename__ = "visitors"

    id: Optional[int] = Field(default=None, primary_key=True)
    timestamp: str = Field(sa_column=Column(String(32), nullable=False, index=True))
    domain: str = Field(sa_column=Column(String(253), nullable=False, index=True))
    path: str = Field(sa_column=Column(Text, nullable=False))
    method: str = Field(sa_column=Column(String(16), nullable=False))
    ip: str = Field(sa_column=Column(String(45), nullable=False))  # IPv6 max length

    # Edge geolocation context
    country: Optional[str] = Field(default=None, sa_column=Column(String(8), nullable=True))
    city: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    region: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    timezone: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    latitude: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    longitude: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    asn: Optional[str] = Field(default=None, sa_column=Column(String(16), nullable=True))

    # Client classification
    user_agent: str = Field(sa_column=Column(Text, nullable=False))
    browser: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    browser_version: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    os: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    device_type: Optional[str] = Field(default=None, sa_column=Column(String(16), nullable=True))
    is_mobile: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    is_bot: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))

    # Request details
    referer: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    accept_language: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    accept_encoding: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    headers: str = Field(sa_column=Column(Text, nullable=False))
    query_params: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    tls_version: Optional[str] = Field(default=None, sa_column=Column(String(16), nullable=True))
    http_protocol: Optional[str] = Field(default=None, sa_column=Column(String(16), nullable=True))
    cloudflare_ray: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))

    @classmethod
    def from_record(cls, record: "VisitorRecord") -> "Visitor":
        """Build a row from a classified visitor record."""
        values = record.model_dump()
        values["is_mobile"] = 1 if record.is_mobile else 0
        values["is_bot"] = 1 if record.is_bot else 0
        return cls(**values)
