"""Create Agent File, instance, audit and dedup tables.

Revision ID: 001
Revises:
Create Date: 2025-10-02

Tables: af_templates, af_versions, agent_instances, agent_migrations,
request_dedup, user_profiles. Also provisions the pgmq upgrade queues.
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create Agent File management tables."""
    op.execute("CREATE EXTENSION IF NOT EXISTS pgmq")

    op.create_table(
        "af_templates",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
    )

    # (template_id, version) primary key: concurrent double-publish yields one conflict
    op.create_table(
        "af_versions",
        sa.Column(
            "template_id",
            sa.Text,
            sa.ForeignKey("af_templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("version", sa.Text, nullable=False),
        sa.Column("af_source", sa.Text, nullable=False),
        sa.Column("checksum", sa.Text, nullable=False),
        sa.Column("is_latest", sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column("migrations", JSONB),
        sa.Column("published_by", sa.Text),
        sa.Column(
            "published_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("template_id", "version", name="af_versions_pk"),
    )
    op.create_index(
        "af_versions_latest_idx",
        "af_versions",
        ["template_id"],
        postgresql_where=sa.text("is_latest"),
    )

    op.create_table(
        "agent_instances",
        sa.Column("agent_id", sa.Text, primary_key=True),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column(
            "template_id",
            sa.Text,
            sa.ForeignKey("af_templates.id"),
            nullable=False,
        ),
        sa.Column("version", sa.Text, nullable=False),
        sa.Column("variables", JSONB, server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
    )
    op.create_index("agent_instances_user_idx", "agent_instances", ["user_id"])
    op.create_index("agent_instances_template_idx", "agent_instances", ["template_id"])

    op.create_table(
        "agent_migrations",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("agent_id", sa.Text, nullable=False),
        sa.Column("from_version", sa.Text, nullable=False),
        sa.Column("to_version", sa.Text, nullable=False),
        sa.Column("dry_run", sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column("plan", JSONB, nullable=False),
        sa.Column("diff", JSONB),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("error", sa.Text),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "status IN ('dry_run', 'applied', 'queued', 'failed')",
            name="chk_agent_migrations_status",
        ),
    )
    op.create_index("agent_migrations_agent_idx", "agent_migrations", ["agent_id"])

    op.create_table(
        "request_dedup",
        sa.Column("idempotency_key", sa.Text, primary_key=True),
        sa.Column("checksum", sa.Text, nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
    )

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("email", sa.Text),
        sa.Column("litellm_key", sa.Text, unique=True),
        sa.Column("letta_agent_id", sa.Text, unique=True),
        sa.Column("agent_status", sa.Text, server_default="active"),
        sa.Column("name", sa.Text),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
    )
    op.create_index("idx_user_profiles_letta_agent_id", "user_profiles", ["letta_agent_id"])

    op.execute("SELECT pgmq.create('upgrade_jobs')")
    op.execute("SELECT pgmq.create('upgrade_jobs_deadletter')")


def downgrade() -> None:
    """Drop Agent File management tables and queues."""
    op.execute("SELECT pgmq.drop_queue('upgrade_jobs_deadletter')")
    op.execute("SELECT pgmq.drop_queue('upgrade_jobs')")
    op.drop_table("user_profiles")
    op.drop_table("request_dedup")
    op.drop_table("agent_migrations")
    op.drop_table("agent_instances")
    op.drop_table("af_versions")
    op.drop_table("af_templates")
