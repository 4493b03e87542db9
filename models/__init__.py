"""Core data models for portal users, auth sessions, and constituency work records."""
import uuid
from datetime import date, datetime

from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db


def generate_uuid() -> str:
	return str(uuid.uuid4())


NATURE_OF_WORK_VALUES: tuple[str, ...] = (
	"development",
	"jan_kalyan",
	"transfers_employment",
	"other",
)

WORK_STATUS_VALUES: tuple[str, ...] = (
	"done",
	"in_progress",
	"incomplete",
)

DEFAULT_WORK_STATUS = "in_progress"

NATURE_OF_WORK_LABELS: dict[str, str] = {
	"development": "Development",
	"jan_kalyan": "Jan Kalyan",
	"transfers_employment": "Transfers/Employment",
	"other": "Other",
}

WORK_STATUS_LABELS: dict[str, str] = {
	"done": "Done",
	"in_progress": "In Progress",
	"incomplete": "Incomplete",
}

USER_ROLES: tuple[str, ...] = (
	"staff",
	"admin",
)


def _iso(value):
	return value.isoformat() if value else None


class User(db.Model):
	__tablename__ = "users"

	id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
	full_name = db.Column(db.String(150), nullable=True)
	email = db.Column(db.String(255), unique=True, nullable=False, index=True)
	password_hash = db.Column(db.String(255), nullable=False)
	role = db.Column(db.String(30), nullable=False, default="staff")
	is_active = db.Column(db.Boolean, default=True, nullable=False)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
	last_login_at = db.Column(db.DateTime, nullable=True)

	sessions = db.relationship("SessionToken", back_populates="user", lazy="dynamic", cascade="all, delete-orphan")

	def set_password(self, password: str) -> None:
		self.password_hash = generate_password_hash(password, method="pbkdf2:sha256", salt_length=16)

	def check_password(self, password: str) -> bool:
		return check_password_hash(self.password_hash, password)

	@property
	def is_admin(self) -> bool:
		return (self.role or "").lower() == "admin"


class SessionToken(db.Model):
	__tablename__ = "auth_sessions"

	id = db.Column(db.Integer, primary_key=True)
	user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
	token_hash = db.Column(db.String(128), nullable=False, unique=True, index=True)
	expires_at = db.Column(db.DateTime, nullable=False)
	revoked_at = db.Column(db.DateTime, nullable=True)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

	user = db.relationship("User", back_populates="sessions")

	@property
	def is_expired(self) -> bool:
		return datetime.utcnow() > self.expires_at

	@property
	def is_revoked(self) -> bool:
		return self.revoked_at is not None

	@property
	def is_valid(self) -> bool:
		return not self.is_expired and not self.is_revoked


class WorkRecord(db.Model):
	__tablename__ = "work_records"

	id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
	full_name = db.Column(db.String(150), nullable=False)
	phone_number = db.Column(db.String(20), nullable=False, index=True)
	place_address = db.Column(db.String(255), nullable=False)
	village_city = db.Column(db.String(120), nullable=False)
	constituency_origin = db.Column(db.String(120), nullable=False, index=True)
	constituency_work = db.Column(db.String(120), nullable=False, index=True)
	nature_of_work = db.Column(db.String(30), nullable=False, index=True)
	nature_of_work_details = db.Column(db.Text, nullable=True)
	action_taken = db.Column(db.Text, nullable=True)
	concerned_person_contact = db.Column(db.String(150), nullable=True)
	work_allocated_to = db.Column(db.String(150), nullable=True)
	status = db.Column(db.String(20), nullable=False, default=DEFAULT_WORK_STATUS, index=True)
	date_of_entry = db.Column(db.Date, nullable=False, default=date.today, index=True)
	is_draft = db.Column(db.Boolean, nullable=False, default=False)
	created_by = db.Column(db.String(36), nullable=True)
	updated_by = db.Column(db.String(36), nullable=True)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
	updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	__table_args__ = (
		db.CheckConstraint(
			"nature_of_work IN ('development','jan_kalyan','transfers_employment','other')",
			name="ck_work_record_nature",
		),
		db.CheckConstraint("status IN ('done','in_progress','incomplete')", name="ck_work_record_status"),
	)

	referrers = db.relationship(
		"ReferredBy",
		back_populates="work_record",
		cascade="all, delete-orphan",
		order_by="ReferredBy.created_at",
	)

	# Columns a caller may change through an update; the rest are owned by the server.
	MUTABLE_FIELDS: tuple[str, ...] = (
		"full_name",
		"phone_number",
		"place_address",
		"village_city",
		"constituency_origin",
		"constituency_work",
		"nature_of_work",
		"nature_of_work_details",
		"action_taken",
		"concerned_person_contact",
		"work_allocated_to",
		"status",
		"date_of_entry",
		"is_draft",
	)

	@property
	def nature_of_work_label(self) -> str:
		return NATURE_OF_WORK_LABELS.get(self.nature_of_work, self.nature_of_work)

	@property
	def status_label(self) -> str:
		return WORK_STATUS_LABELS.get(self.status, self.status)

	def to_dict(self, include_referrers: bool = False) -> dict:
		payload = {
			"id": self.id,
			"full_name": self.full_name,
			"phone_number": self.phone_number,
			"place_address": self.place_address,
			"village_city": self.village_city,
			"constituency_origin": self.constituency_origin,
			"constituency_work": self.constituency_work,
			"nature_of_work": self.nature_of_work,
			"nature_of_work_label": self.nature_of_work_label,
			"nature_of_work_details": self.nature_of_work_details,
			"action_taken": self.action_taken,
			"concerned_person_contact": self.concerned_person_contact,
			"work_allocated_to": self.work_allocated_to,
			"status": self.status,
			"status_label": self.status_label,
			"date_of_entry": _iso(self.date_of_entry),
			"is_draft": bool(self.is_draft),
			"created_by": self.created_by,
			"updated_by": self.updated_by,
			"created_at": _iso(self.created_at),
			"updated_at": _iso(self.updated_at),
		}
		if include_referrers:
			payload["referred_by"] = [ref.to_dict() for ref in self.referrers]
		return payload


class ReferredBy(db.Model):
	__tablename__ = "referred_by"

	id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
	work_record_id = db.Column(
		db.String(36),
		db.ForeignKey("work_records.id", ondelete="CASCADE"),
		nullable=False,
		index=True,
	)
	referrer_name = db.Column(db.String(150), nullable=False)
	referrer_contact = db.Column(db.String(150), nullable=True)
	is_self = db.Column(db.Boolean, nullable=False, default=False)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

	work_record = db.relationship("WorkRecord", back_populates="referrers")

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"work_record_id": self.work_record_id,
			"referrer_name": self.referrer_name,
			"referrer_contact": self.referrer_contact,
			"is_self": bool(self.is_self),
			"created_at": _iso(self.created_at),
		}
