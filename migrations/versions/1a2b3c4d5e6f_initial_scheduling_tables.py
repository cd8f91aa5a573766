"""initial scheduling tables

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "1a2b3c4d5e6f"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=120), nullable=True),
        sa.Column("phone_number", sa.String(length=30), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_users_email"), ["email"], unique=True)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity", sa.String(length=80), nullable=True),
        sa.Column("entity_id", sa.String(length=80), nullable=True),
        sa.Column("ip", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(length=255), nullable=True),
        sa.Column("metadata_json", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(length=60), nullable=False),
        sa.Column("recipient_email", sa.String(length=255), nullable=True),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("message", sa.String(length=500), nullable=False),
        sa.Column("payload_json", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("notifications", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_notifications_kind"), ["kind"], unique=False)
        batch_op.create_index(batch_op.f("ix_notifications_recipient_email"), ["recipient_email"], unique=False)

    op.create_table(
        "working_hours",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("barber_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["barber_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("barber_id", "date", name="uq_working_hours_barber_date"),
    )
    with op.batch_alter_table("working_hours", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_working_hours_barber_id"), ["barber_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_working_hours_date"), ["date"], unique=False)

    op.create_table(
        "blocked_slots",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("barber_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["barber_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("blocked_slots", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_blocked_slots_barber_id"), ["barber_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_blocked_slots_date"), ["date"], unique=False)

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=True),
        sa.Column("customer_name", sa.String(length=120), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=False),
        sa.Column("customer_phone", sa.String(length=30), nullable=True),
        sa.Column("barber_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("requested_time", sa.String(length=5), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=True),
        sa.Column("end_time", sa.String(length=5), nullable=True),
        sa.Column("estimated_time", sa.Integer(), nullable=False),
        sa.Column("service", sa.String(length=80), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("token_number", sa.String(length=40), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("estimated_time BETWEEN 5 AND 300", name="ck_appointment_estimated_time"),
        sa.ForeignKeyConstraint(["barber_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["customer_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("customer_email", "date", "requested_time", name="uq_appointment_customer_slot"),
    )
    with op.batch_alter_table("appointments", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_appointments_barber_id"), ["barber_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_appointments_created_at"), ["created_at"], unique=False)
        batch_op.create_index(batch_op.f("ix_appointments_customer_id"), ["customer_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_appointments_date"), ["date"], unique=False)
        batch_op.create_index(batch_op.f("ix_appointments_status"), ["status"], unique=False)

    op.create_table(
        "walk_ins",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("customer_name", sa.String(length=120), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=True),
        sa.Column("customer_phone", sa.String(length=30), nullable=True),
        sa.Column("barber_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("arrival_time", sa.String(length=5), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=True),
        sa.Column("end_time", sa.String(length=5), nullable=True),
        sa.Column("estimated_time", sa.Integer(), nullable=False),
        sa.Column("service", sa.String(length=80), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("token_number", sa.String(length=40), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("estimated_time BETWEEN 5 AND 300", name="ck_walk_in_estimated_time"),
        sa.ForeignKeyConstraint(["barber_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("walk_ins", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_walk_ins_barber_id"), ["barber_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_walk_ins_date"), ["date"], unique=False)
        batch_op.create_index(batch_op.f("ix_walk_ins_status"), ["status"], unique=False)

    op.create_table(
        "waiting_queue",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("barber_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("token_number", sa.String(length=40), nullable=False),
        sa.Column("source_type", sa.String(length=20), nullable=False),
        sa.Column("appointment_id", sa.Integer(), nullable=True),
        sa.Column("walk_in_id", sa.Integer(), nullable=True),
        sa.Column("estimated_time", sa.Integer(), nullable=False),
        sa.Column("estimated_start_time", sa.String(length=5), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "(source_type = 'appointment' AND appointment_id IS NOT NULL AND walk_in_id IS NULL) OR "
            "(source_type = 'walkin' AND walk_in_id IS NOT NULL AND appointment_id IS NULL)",
            name="ck_queue_single_source",
        ),
        sa.CheckConstraint("position >= 1", name="ck_queue_position_positive"),
        sa.ForeignKeyConstraint(["appointment_id"], ["appointments.id"]),
        sa.ForeignKeyConstraint(["barber_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["walk_in_id"], ["walk_ins.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("appointment_id"),
        sa.UniqueConstraint("walk_in_id"),
        sa.UniqueConstraint("token_number"),
        sa.UniqueConstraint("barber_id", "date", "position", name="uq_queue_position"),
    )
    with op.batch_alter_table("waiting_queue", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_waiting_queue_barber_id"), ["barber_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_waiting_queue_date"), ["date"], unique=False)
        batch_op.create_index(batch_op.f("ix_waiting_queue_status"), ["status"], unique=False)
        batch_op.create_index("ix_queue_barber_date_position", ["barber_id", "date", "position"], unique=False)

    op.create_table(
        "queue_lanes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("barber_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("last_position", sa.Integer(), nullable=False),
        sa.Column("serving_entry_id", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["barber_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["serving_entry_id"], ["waiting_queue.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("barber_id", "date", name="uq_queue_lane_barber_date"),
    )


def downgrade():
    op.drop_table("queue_lanes")

    with op.batch_alter_table("waiting_queue", schema=None) as batch_op:
        batch_op.drop_index("ix_queue_barber_date_position")
        batch_op.drop_index(batch_op.f("ix_waiting_queue_status"))
        batch_op.drop_index(batch_op.f("ix_waiting_queue_date"))
        batch_op.drop_index(batch_op.f("ix_waiting_queue_barber_id"))
    op.drop_table("waiting_queue")

    with op.batch_alter_table("walk_ins", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_walk_ins_status"))
        batch_op.drop_index(batch_op.f("ix_walk_ins_date"))
        batch_op.drop_index(batch_op.f("ix_walk_ins_barber_id"))
    op.drop_table("walk_ins")

    with op.batch_alter_table("appointments", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_appointments_status"))
        batch_op.drop_index(batch_op.f("ix_appointments_date"))
        batch_op.drop_index(batch_op.f("ix_appointments_customer_id"))
        batch_op.drop_index(batch_op.f("ix_appointments_created_at"))
        batch_op.drop_index(batch_op.f("ix_appointments_barber_id"))
    op.drop_table("appointments")

    with op.batch_alter_table("blocked_slots", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_blocked_slots_date"))
        batch_op.drop_index(batch_op.f("ix_blocked_slots_barber_id"))
    op.drop_table("blocked_slots")

    with op.batch_alter_table("working_hours", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_working_hours_date"))
        batch_op.drop_index(batch_op.f("ix_working_hours_barber_id"))
    op.drop_table("working_hours")

    with op.batch_alter_table("notifications", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_notifications_recipient_email"))
        batch_op.drop_index(batch_op.f("ix_notifications_kind"))
    op.drop_table("notifications")

    op.drop_table("audit_logs")

    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_users_email"))
    op.drop_table("users")
