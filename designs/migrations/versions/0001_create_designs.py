"""create_designs

Revision ID: 0001_create_designs
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = '0001_create_designs'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'designs',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('design_id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('type', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('images', sa.JSON, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_designs_design_id', 'designs', ['design_id'], unique=True)
    op.create_index('ix_designs_created_at', 'designs', ['created_at'])

def downgrade():
    op.drop_index('ix_designs_created_at', table_name='designs')
    op.drop_index('ix_designs_design_id', table_name='designs')
    op.drop_table('designs')
