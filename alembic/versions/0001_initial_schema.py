"""Initial schema: users, cars, operators, assignments, audit log

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_ONLY = sa.text('"endDate" IS NULL')


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("role", sa.Enum("ADMIN", "EMPLOYEE", name="rolename"), nullable=False),
        sa.Column("isActive", sa.Boolean(), nullable=False),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "cars",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("licensePlate", sa.String(20), nullable=False),
        sa.Column("brand", sa.String(100), nullable=False),
        sa.Column("model", sa.String(100), nullable=False),
        sa.Column("status", sa.Enum("active", "maintenance", "retired", name="carstatus"), nullable=False),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_cars_licensePlate", "cars", ["licensePlate"], unique=True)

    op.create_table(
        "car_operators",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("employeeNumber", sa.String(50), nullable=False),
        sa.Column("firstName", sa.String(100), nullable=False),
        sa.Column("lastName", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("isActive", sa.Boolean(), nullable=False),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_car_operators_employeeNumber", "car_operators", ["employeeNumber"], unique=True)

    op.create_table(
        "car_operator_assignments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("carId", sa.Integer(), sa.ForeignKey("cars.id"), nullable=False),
        sa.Column("operatorId", sa.Integer(), sa.ForeignKey("car_operators.id"), nullable=False),
        sa.Column("startDate", sa.Date(), nullable=False),
        sa.Column("endDate", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("createdById", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.CheckConstraint('"endDate" IS NULL OR "endDate" >= "startDate"', name="ck_assignment_dates"),
    )
    op.create_index("ix_car_operator_assignments_carId", "car_operator_assignments", ["carId"])
    op.create_index("ix_car_operator_assignments_operatorId", "car_operator_assignments", ["operatorId"])
    op.create_index("uq_active_car_assignment", "car_operator_assignments", ["carId"], unique=True,
                    postgresql_where=ACTIVE_ONLY, sqlite_where=ACTIVE_ONLY)
    op.create_index("uq_active_operator_assignment", "car_operator_assignments", ["operatorId"], unique=True,
                    postgresql_where=ACTIVE_ONLY, sqlite_where=ACTIVE_ONLY)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("entityType", sa.String(100), nullable=False),
        sa.Column("entityId", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade():
    op.drop_table("audit_logs")
    op.drop_index("uq_active_operator_assignment", table_name="car_operator_assignments")
    op.drop_index("uq_active_car_assignment", table_name="car_operator_assignments")
    op.drop_table("car_operator_assignments")
    op.drop_index("ix_car_operators_employeeNumber", table_name="car_operators")
    op.drop_table("car_operators")
    op.drop_index("ix_cars_licensePlate", table_name="cars")
    op.drop_table("cars")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    sa.Enum(name="carstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="rolename").drop(op.get_bind(), checkfirst=True)
