"""Ledger state, balance and event schema baseline

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "ledger_state",
        sa.Column("ledger_id", sa.Text(), primary_key=True),
        sa.Column("owner", sa.Text(), nullable=False),
        sa.Column("payer", sa.Text(), nullable=False),
        sa.Column("first_beneficiary", sa.Text(), nullable=False),
        sa.Column("second_beneficiary", sa.Text(), nullable=False),
        sa.Column("closed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("total_deposited", sa.Text(), nullable=False, server_default="0"),
        sa.Column("total_withdrawn", sa.Text(), nullable=False, server_default="0"),
        sa.Column("last_event_sequence", sa.BigInteger(), nullable=False),
        sa.Column("updated_at_utc", sa.Text(), nullable=False),
        sa.CheckConstraint("first_beneficiary <> second_beneficiary", name="ck_ledger_state_distinct_beneficiaries"),
    )

    op.create_table(
        "ledger_balance",
        sa.Column("ledger_id", sa.Text(), nullable=False),
        sa.Column("identity", sa.Text(), nullable=False),
        sa.Column("amount", sa.Text(), nullable=False),
        sa.Column("updated_at_utc", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("ledger_id", "identity", name="pk_ledger_balance"),
        sa.ForeignKeyConstraint(["ledger_id"], ["ledger_state.ledger_id"], ondelete="CASCADE"),
    )

    op.create_table(
        "ledger_event",
        sa.Column("ledger_id", sa.Text(), nullable=False),
        sa.Column("event_sequence", sa.BigInteger(), nullable=False),
        sa.Column("event_name", sa.Text(), nullable=False),
        sa.Column("payload", sa.Text(), nullable=False),
        sa.Column("recorded_at_utc", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("ledger_id", "event_sequence", name="pk_ledger_event"),
        sa.ForeignKeyConstraint(["ledger_id"], ["ledger_state.ledger_id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "event_name IN ('Created', 'PayerChanged', 'Splitted', 'Withdraw', 'Closed')",
            name="ck_ledger_event_name",
        ),
    )
    op.create_index("ix_ledger_event_ledger_name", "ledger_event", ["ledger_id", "event_name"])


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_ledger_event_ledger_name", table_name="ledger_event")
    op.drop_table("ledger_event")
    op.drop_table("ledger_balance")
    op.drop_table("ledger_state")
