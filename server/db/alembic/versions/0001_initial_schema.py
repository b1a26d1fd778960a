"""Initial database schema

Revision ID: 0001
Revises:
Create Date: 2025-08-02 12:30:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create presentations table
    op.create_table('presentations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('city', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time', sa.String(length=5), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('discordId', sa.String(length=128), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('createdAt', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(city) > 0', name='ck_presentation_city_not_empty'),
        sa.CheckConstraint('length(time) > 0', name='ck_presentation_time_not_empty'),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'rescheduled', 'canceled')",
            name='ck_presentation_status_valid'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_presentations_date'), 'presentations', ['date'], unique=False)
    op.create_index(op.f('ix_presentations_status'), 'presentations', ['status'], unique=False)
    op.create_index(op.f('ix_presentations_createdAt'), 'presentations', ['createdAt'], unique=False)

    # Create alistamentos (enlistment applications) table
    op.create_table('alistamentos',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('nome', sa.String(length=128), nullable=False),
        sa.Column('sobrenome', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('discordNick', sa.String(length=128), nullable=False),
        sa.Column('idade', sa.String(length=8), nullable=False),
        sa.Column('motivoEntrada', sa.Text(), nullable=False),
        sa.Column('conhecimentoAviao', sa.String(length=32), nullable=False),
        sa.Column('vooFivem', sa.String(length=8), nullable=False),
        sa.Column('conheceEsquadrilha', sa.String(length=8), nullable=False),
        sa.Column('turno', sa.JSON(), nullable=False),
        sa.Column('userIP', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('createdAt', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending', 'in_progress', 'approved', 'rejected')",
            name='ck_enlistment_status_valid'
        ),
        sa.CheckConstraint(
            "\"conhecimentoAviao\" IN ('has-knowledge', 'willing-to-learn')",
            name='ck_enlistment_aviation_knowledge_valid'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_alistamentos_status'), 'alistamentos', ['status'], unique=False)
    op.create_index(op.f('ix_alistamentos_createdAt'), 'alistamentos', ['createdAt'], unique=False)

    # Create showcase tables
    op.create_table('carousel',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('url', sa.String(length=2048), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('createdAt', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_carousel_order'), 'carousel', ['order'], unique=False)

    op.create_table('pilots',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('position', sa.String(length=128), nullable=False),
        sa.Column('photoURL', sa.String(length=2048), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('createdAt', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_pilots_order'), 'pilots', ['order'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('pilots')
    op.drop_table('carousel')
    op.drop_table('alistamentos')
    op.drop_table('presentations')
